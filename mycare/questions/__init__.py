# mycare/questions/__init__.py
from .schema import (
    BaseQuestion,
    DateQuestion,
    InvalidQuestion,
    MultiSelectQuestion,
    MultipleChoiceQuestion,
    NumberPickerQuestion,
    QuestionDescriptor,
    SliderQuestion,
    SummaryQuestion,
    TextQuestion,
    UnknownQuestion,
    YesNoQuestion,
    parse_question,
)
from .validation import Answer, AnswerRejected, format_answer, normalize_answer
from .widgets import Control, Emission, Widget, build_widget

__all__ = [
    "BaseQuestion",
    "DateQuestion",
    "InvalidQuestion",
    "MultiSelectQuestion",
    "MultipleChoiceQuestion",
    "NumberPickerQuestion",
    "QuestionDescriptor",
    "SliderQuestion",
    "SummaryQuestion",
    "TextQuestion",
    "UnknownQuestion",
    "YesNoQuestion",
    "parse_question",
    "Answer",
    "AnswerRejected",
    "format_answer",
    "normalize_answer",
    "Control",
    "Emission",
    "Widget",
    "build_widget",
]

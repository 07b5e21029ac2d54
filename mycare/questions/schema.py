# mycare/questions/schema.py
from __future__ import annotations

import logging
from typing import Any, ClassVar, Dict, List, Optional, Type, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

logger = logging.getLogger(__name__)


class InvalidQuestion(ValueError):
    """Raised when a question payload cannot form a usable descriptor."""


class BaseQuestion(BaseModel):
    """
    One interview step as described by the upstream agent.

    Each subclass is one variant of the closed question-type family and
    declares only the constraint fields it needs; anything else sent by the
    agent is ignored.
    """

    TYPE: ClassVar[str] = ""
    ALIASES: ClassVar[tuple[str, ...]] = ()
    ANSWERABLE: ClassVar[bool] = True

    question_id: str = Field(
        ...,
        validation_alias=AliasChoices("questionId", "question_id", "id"),
    )
    question: str = Field(
        "",
        validation_alias=AliasChoices("question", "text"),
    )

    # Allow extra fields from the agent without crashing; numeric ids/options become strings
    model_config = ConfigDict(extra="ignore", frozen=True, coerce_numbers_to_str=True)

    @property
    def type(self) -> str:
        return self.TYPE

    @property
    def answerable(self) -> bool:
        return self.ANSWERABLE

    def to_wire(self) -> Dict[str, Any]:
        """
        Serialise back to the agent reply format (camelCase keys).
        """
        data: Dict[str, Any] = {
            "questionId": self.question_id,
            "question": self.question,
            "type": self.type,
        }
        data.update(self._constraints())
        return data

    def _constraints(self) -> Dict[str, Any]:
        return {}


class _ChoiceQuestion(BaseQuestion):
    options: List[str]

    @field_validator("options")
    @classmethod
    def _check_options(cls, value: List[str]) -> List[str]:
        cleaned: List[str] = []
        for opt in value:
            if opt not in cleaned:
                cleaned.append(opt)
        if not cleaned:
            raise ValueError(f"'{cls.TYPE}' question requires at least one option")
        return cleaned

    def _constraints(self) -> Dict[str, Any]:
        return {"options": list(self.options)}


class _BoundedQuestion(BaseQuestion):
    min: float
    max: float
    step: float = 1

    @model_validator(mode="before")
    @classmethod
    def _default_step(cls, data: Any) -> Any:
        # agents often send "step": null
        if isinstance(data, dict) and data.get("step") is None:
            data = {k: v for k, v in data.items() if k != "step"}
        return data

    @model_validator(mode="after")
    def _check_bounds(self):
        if self.min > self.max:
            raise ValueError(f"min ({self.min}) is greater than max ({self.max})")
        if self.step <= 0:
            raise ValueError(f"step must be positive, got {self.step}")
        return self

    def _constraints(self) -> Dict[str, Any]:
        return {"min": self.min, "max": self.max, "step": self.step}


class NumberPickerQuestion(_BoundedQuestion):
    TYPE: ClassVar[str] = "number-picker"


class SliderQuestion(_BoundedQuestion):
    TYPE: ClassVar[str] = "slider"


class MultipleChoiceQuestion(_ChoiceQuestion):
    TYPE: ClassVar[str] = "multiple-choice"


class MultiSelectQuestion(_ChoiceQuestion):
    TYPE: ClassVar[str] = "multi-select"


class DateQuestion(BaseQuestion):
    TYPE: ClassVar[str] = "date"
    ALIASES: ClassVar[tuple[str, ...]] = ("date-picker",)


class TextQuestion(BaseQuestion):
    TYPE: ClassVar[str] = "text"


class YesNoQuestion(BaseQuestion):
    TYPE: ClassVar[str] = "yes-no"
    ALIASES: ClassVar[tuple[str, ...]] = ("yes_no",)


class SummaryQuestion(BaseQuestion):
    TYPE: ClassVar[str] = "summary"
    ANSWERABLE: ClassVar[bool] = False

    summary: str

    def _constraints(self) -> Dict[str, Any]:
        return {"summary": self.summary}


class UnknownQuestion(BaseQuestion):
    """
    Fallback for a type tag outside the known family.
    Kept so the UI can show an inline error instead of failing the turn.
    """

    ANSWERABLE: ClassVar[bool] = False

    raw_type: str = ""

    @property
    def type(self) -> str:
        return self.raw_type


QuestionDescriptor = Union[
    NumberPickerQuestion,
    MultipleChoiceQuestion,
    MultiSelectQuestion,
    SliderQuestion,
    DateQuestion,
    TextQuestion,
    YesNoQuestion,
    SummaryQuestion,
    UnknownQuestion,
]

QUESTION_TYPES: Dict[str, Type[BaseQuestion]] = {}
for _cls in (
    NumberPickerQuestion,
    MultipleChoiceQuestion,
    MultiSelectQuestion,
    SliderQuestion,
    DateQuestion,
    TextQuestion,
    YesNoQuestion,
    SummaryQuestion,
):
    QUESTION_TYPES[_cls.TYPE] = _cls
    for _alias in _cls.ALIASES:
        QUESTION_TYPES[_alias] = _cls


def normalize_type(raw_type: Any) -> str:
    return str(raw_type or "").strip().lower()


def parse_question(payload: Dict[str, Any]) -> QuestionDescriptor:
    """
    Build a descriptor from an agent payload.

    - type lookup is case-insensitive and accepts the known aliases
    - an unrecognised type yields UnknownQuestion rather than an error
    - missing or inconsistent constraint fields raise InvalidQuestion
    """
    if not isinstance(payload, dict):
        raise InvalidQuestion(f"Question payload must be an object, got {type(payload).__name__}")

    raw_type = payload.get("type")
    cls: Optional[Type[BaseQuestion]] = QUESTION_TYPES.get(normalize_type(raw_type))

    try:
        if cls is None:
            logger.warning("Unknown question type from agent: %r", raw_type)
            return UnknownQuestion.model_validate({**payload, "raw_type": str(raw_type or "")})
        return cls.model_validate(payload)
    except ValidationError as exc:
        raise InvalidQuestion(
            f"Invalid '{normalize_type(raw_type)}' question: {exc.errors()[0].get('msg')}"
        ) from exc

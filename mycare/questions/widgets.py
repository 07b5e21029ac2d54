# mycare/questions/widgets.py
"""
Widget renderer: one interactive control per question descriptor.

A widget owns the local input state for exactly one descriptor (the number
being typed, the toggled options, the slider position). It never talks to
the agent; it only reports an Emission when the user commits an answer.
Invalid input is dropped silently: the event returns None and the state
does not change.
"""
from __future__ import annotations

import logging
from typing import Any, ClassVar, Dict, List, NamedTuple, Optional, Set, Type

from pydantic import BaseModel, Field

from mycare.questions.schema import (
    BaseQuestion,
    DateQuestion,
    MultiSelectQuestion,
    MultipleChoiceQuestion,
    NumberPickerQuestion,
    SliderQuestion,
    SummaryQuestion,
    TextQuestion,
    UnknownQuestion,
    YesNoQuestion,
)
from mycare.questions.validation import (
    Answer,
    AnswerRejected,
    accepts_number_keystroke,
    format_answer,
    normalize_answer,
    parse_number,
    snap_to_step,
)

logger = logging.getLogger(__name__)


class Emission(NamedTuple):
    question_id: str
    answer: Answer


class Control(BaseModel):
    """
    Framework-neutral description of what the UI should draw.
    """

    kind: str
    question_id: str
    label: str
    events: List[str] = Field(default_factory=list)
    interactive: bool = True

    options: List[str] = Field(default_factory=list)
    selected: List[str] = Field(default_factory=list)
    min: Optional[float] = None
    max: Optional[float] = None
    step: Optional[float] = None
    value: Any = None

    submit_enabled: bool = False
    can_increment: bool = False
    can_decrement: bool = False

    text: Optional[str] = None
    error: Optional[str] = None


class Widget:
    """
    Base widget. Subclasses list the events they understand in EVENTS and
    implement one `_on_<event>` method per entry.
    """

    KIND: ClassVar[str] = ""
    EVENTS: ClassVar[tuple[str, ...]] = ()

    def __init__(self, question: BaseQuestion):
        self.question = question

    @property
    def question_id(self) -> str:
        return self.question.question_id

    def render(self) -> Control:
        control = Control(
            kind=self.KIND,
            question_id=self.question_id,
            label=self.question.question,
            events=list(self.EVENTS),
            interactive=bool(self.EVENTS),
        )
        self._decorate(control)
        return control

    def handle(self, event: str, value: Any = None) -> Optional[Emission]:
        """
        Apply one input event; returns an Emission when the answer is committed.
        """
        if event not in self.EVENTS:
            logger.debug("Ignoring %r event on %s widget", event, self.KIND)
            return None
        handler = getattr(self, f"_on_{event}")
        return handler(value)

    def _decorate(self, control: Control) -> None:
        pass

    def _emit(self, raw: Any) -> Optional[Emission]:
        try:
            answer = normalize_answer(self.question, raw)
        except AnswerRejected:
            return None
        return Emission(self.question_id, answer)


class NumberPickerWidget(Widget):
    KIND = "number-picker"
    EVENTS = ("input", "increment", "decrement", "submit")

    question: NumberPickerQuestion

    def __init__(self, question: NumberPickerQuestion):
        super().__init__(question)
        self.buffer = ""

    def _current(self) -> Optional[float]:
        try:
            return float(self.buffer)
        except ValueError:
            return None

    def _on_input(self, value: Any) -> None:
        text = "" if value is None else str(value)
        if accepts_number_keystroke(self.question, text):
            self.buffer = text
        return None

    def _step_by(self, delta: float) -> None:
        current = self._current()
        if current is None:
            current = self.question.min
        moved = min(max(current + delta, self.question.min), self.question.max)
        self.buffer = format_answer(round(moved, 10))

    def _on_increment(self, value: Any) -> None:
        self._step_by(self.question.step)
        return None

    def _on_decrement(self, value: Any) -> None:
        self._step_by(-self.question.step)
        return None

    def _on_submit(self, value: Any) -> Optional[Emission]:
        return self._emit(self.buffer)

    def _decorate(self, control: Control) -> None:
        current = self._current()
        control.min = self.question.min
        control.max = self.question.max
        control.step = self.question.step
        control.value = self.buffer
        control.submit_enabled = current is not None
        control.can_increment = current is None or current < self.question.max
        control.can_decrement = current is None or current > self.question.min


class MultipleChoiceWidget(Widget):
    KIND = "multiple-choice"
    EVENTS = ("select",)

    question: MultipleChoiceQuestion

    def __init__(self, question: MultipleChoiceQuestion):
        super().__init__(question)
        self.choice: Optional[str] = None

    def _on_select(self, value: Any) -> Optional[Emission]:
        emission = self._emit(value)
        if emission is not None:
            self.choice = emission.answer
        return emission

    def _decorate(self, control: Control) -> None:
        control.options = list(self.question.options)
        control.value = self.choice
        control.selected = [self.choice] if self.choice else []


class MultiSelectWidget(Widget):
    KIND = "multi-select"
    EVENTS = ("toggle", "submit")

    question: MultiSelectQuestion

    def __init__(self, question: MultiSelectQuestion):
        super().__init__(question)
        self.selected: Set[str] = set()

    def _on_toggle(self, value: Any) -> None:
        # either a bare option (flip) or {"option": ..., "checked": bool}
        if isinstance(value, dict):
            option, checked = value.get("option"), value.get("checked")
        else:
            option, checked = value, None
        if option not in self.question.options:
            return None
        if checked is None:
            checked = option not in self.selected
        if checked:
            self.selected.add(option)
        else:
            self.selected.discard(option)
        return None

    def _on_submit(self, value: Any) -> Optional[Emission]:
        if not self.selected:
            return None
        return self._emit(self.selected)

    def _decorate(self, control: Control) -> None:
        control.options = list(self.question.options)
        control.selected = [o for o in self.question.options if o in self.selected]
        control.submit_enabled = bool(self.selected)


class SliderWidget(Widget):
    KIND = "slider"
    EVENTS = ("change", "commit")

    question: SliderQuestion

    def __init__(self, question: SliderQuestion):
        super().__init__(question)
        self.position: float = question.min

    def _on_change(self, value: Any) -> None:
        try:
            number = parse_number(value)
        except AnswerRejected:
            return None
        # the thumb cannot leave the track
        clamped = min(max(number, self.question.min), self.question.max)
        self.position = snap_to_step(self.question, clamped)
        return None

    def _on_commit(self, value: Any) -> Optional[Emission]:
        if value is not None:
            self._on_change(value)
        return self._emit(self.position)

    def _decorate(self, control: Control) -> None:
        control.min = self.question.min
        control.max = self.question.max
        control.step = self.question.step
        control.value = self.position
        control.submit_enabled = True


class DateWidget(Widget):
    KIND = "date"
    EVENTS = ("pick",)

    def _on_pick(self, value: Any) -> Optional[Emission]:
        return self._emit(value)


class TextWidget(Widget):
    KIND = "text"
    EVENTS = ("input", "submit")

    def __init__(self, question: TextQuestion):
        super().__init__(question)
        self.buffer = ""

    def _on_input(self, value: Any) -> None:
        self.buffer = "" if value is None else str(value)
        return None

    def _on_submit(self, value: Any) -> Optional[Emission]:
        if value is not None:
            self._on_input(value)
        return self._emit(self.buffer)

    def _decorate(self, control: Control) -> None:
        control.value = self.buffer
        control.submit_enabled = bool(self.buffer.strip())


class YesNoWidget(Widget):
    KIND = "yes-no"
    EVENTS = ("click",)

    def _on_click(self, value: Any) -> Optional[Emission]:
        if isinstance(value, bool):
            # buttons carry labels, not booleans
            return None
        return self._emit(value)

    def _decorate(self, control: Control) -> None:
        control.options = ["Yes", "No"]


class SummaryWidget(Widget):
    KIND = "summary"

    question: SummaryQuestion

    def _decorate(self, control: Control) -> None:
        control.text = self.question.summary


class UnsupportedWidget(Widget):
    KIND = "unsupported"

    def _decorate(self, control: Control) -> None:
        control.error = f"Unsupported question type: {self.question.type}"


WIDGETS: Dict[Type[BaseQuestion], Type[Widget]] = {
    NumberPickerQuestion: NumberPickerWidget,
    MultipleChoiceQuestion: MultipleChoiceWidget,
    MultiSelectQuestion: MultiSelectWidget,
    SliderQuestion: SliderWidget,
    DateQuestion: DateWidget,
    TextQuestion: TextWidget,
    YesNoQuestion: YesNoWidget,
    SummaryQuestion: SummaryWidget,
    UnknownQuestion: UnsupportedWidget,
}


def build_widget(question: BaseQuestion) -> Widget:
    """
    Fresh widget (and fresh input state) for one descriptor.
    """
    widget_cls = WIDGETS.get(type(question), UnsupportedWidget)
    if widget_cls is UnsupportedWidget:
        logger.warning(
            "No widget for question %s of type %r",
            question.question_id,
            question.type,
        )
    return widget_cls(question)

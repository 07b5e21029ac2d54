# mycare/questions/validation.py
from __future__ import annotations

import math
import re
from datetime import date, datetime
from typing import Any, List, Union

from mycare.questions.schema import (
    BaseQuestion,
    DateQuestion,
    MultiSelectQuestion,
    MultipleChoiceQuestion,
    NumberPickerQuestion,
    SliderQuestion,
    TextQuestion,
    YesNoQuestion,
)

Answer = Union[str, float, List[str]]

# optional sign, digits, at most one decimal point; empty is allowed so the user can backspace
_NUMBER_BUFFER = re.compile(r"^-?\d*\.?\d*$")


class AnswerRejected(ValueError):
    """Raised when a raw value is not a valid answer for the question."""


def parse_number(value: Any) -> float:
    if isinstance(value, bool):
        raise AnswerRejected("Expected a number, got a boolean")
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str) and value.strip():
        try:
            number = float(value.strip())
        except ValueError as exc:
            raise AnswerRejected(f"Not a number: {value!r}") from exc
    else:
        raise AnswerRejected(f"Not a number: {value!r}")
    if math.isnan(number) or math.isinf(number):
        raise AnswerRejected(f"Not a finite number: {value!r}")
    return number


def within_bounds(question: Union[NumberPickerQuestion, SliderQuestion], number: float) -> bool:
    return question.min <= number <= question.max


def snap_to_step(question: SliderQuestion, number: float) -> float:
    """
    Round to the nearest step counted from `min`, then clamp into bounds.
    """
    steps = round((number - question.min) / question.step)
    snapped = question.min + steps * question.step
    snapped = min(max(snapped, question.min), question.max)
    # avoid 0.30000000000000004 style noise from float steps
    return round(snapped, 10)


def accepts_number_keystroke(question: NumberPickerQuestion, buffer: str) -> bool:
    """
    Whether a number-picker text buffer may replace the current one.

    Non-numeric text and out-of-range values are refused outright instead of
    being corrected.
    """
    if not _NUMBER_BUFFER.match(buffer):
        return False
    if buffer.startswith("-") and question.min >= 0:
        return False
    if buffer == "":
        return True
    try:
        number = float(buffer)
    except ValueError:
        # "." or "-" alone is a valid prefix
        return True
    return within_bounds(question, number)


def format_date(value: Any) -> str:
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, str) and value.strip():
        text = value.strip()
        try:
            return date.fromisoformat(text[:10]).isoformat()
        except ValueError as exc:
            raise AnswerRejected(f"Not an ISO date: {value!r}") from exc
    raise AnswerRejected("A date must be chosen")


def normalize_answer(question: BaseQuestion, raw: Any) -> Answer:
    """
    Coerce a raw value into the canonical answer for `question`.

    Raises AnswerRejected if the value does not satisfy the question's
    constraints. Summary and unknown questions accept no answer at all.
    """
    if isinstance(question, NumberPickerQuestion):
        number = parse_number(raw)
        if not within_bounds(question, number):
            raise AnswerRejected(
                f"{number:g} is outside [{question.min:g}, {question.max:g}]"
            )
        return number

    if isinstance(question, SliderQuestion):
        number = parse_number(raw)
        if not within_bounds(question, number):
            raise AnswerRejected(
                f"{number:g} is outside [{question.min:g}, {question.max:g}]"
            )
        return snap_to_step(question, number)

    if isinstance(question, MultipleChoiceQuestion):
        if not isinstance(raw, str) or raw not in question.options:
            raise AnswerRejected(f"{raw!r} is not one of the options")
        return raw

    if isinstance(question, MultiSelectQuestion):
        if isinstance(raw, str) or not isinstance(raw, (list, tuple, set, frozenset)):
            raise AnswerRejected("Expected a collection of options")
        if not all(isinstance(c, str) for c in raw):
            raise AnswerRejected("Options must be strings")
        chosen = set(raw)
        unknown = [c for c in chosen if c not in question.options]
        if unknown:
            raise AnswerRejected(f"Not among the options: {sorted(map(str, unknown))}")
        if not chosen:
            raise AnswerRejected("Select at least one option")
        # option order makes the answer independent of click order
        return [opt for opt in question.options if opt in chosen]

    if isinstance(question, DateQuestion):
        return format_date(raw)

    if isinstance(question, TextQuestion):
        if not isinstance(raw, str) or not raw.strip():
            raise AnswerRejected("Answer must not be empty")
        return raw.strip()

    if isinstance(question, YesNoQuestion):
        if isinstance(raw, bool):
            return "Yes" if raw else "No"
        if isinstance(raw, str) and raw.strip().lower() in ("yes", "no"):
            return raw.strip().capitalize()
        raise AnswerRejected(f"Expected 'Yes' or 'No', got {raw!r}")

    raise AnswerRejected(f"'{question.type}' questions cannot be answered")


def format_answer(answer: Any) -> str:
    """
    Human-readable answer for the transcript, e.g. "7", "Fever, Cough".
    """
    if isinstance(answer, (list, tuple)):
        return ", ".join(str(a) for a in answer)
    if isinstance(answer, float) and answer.is_integer():
        return str(int(answer))
    return str(answer)

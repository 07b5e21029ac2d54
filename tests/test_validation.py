from datetime import date, datetime

import pytest

from mycare.questions import AnswerRejected, format_answer, normalize_answer, parse_question
from mycare.questions.validation import accepts_number_keystroke


def _q(**payload):
    return parse_question({"questionId": "q1", "question": "?", **payload})


NUMBER = _q(type="number-picker", min=1, max=120, step=1)
SLIDER = _q(type="slider", min=0, max=10, step=0.5)
CHOICE = _q(type="multiple-choice", options=["Mild", "Moderate", "Severe"])
MULTI = _q(type="multi-select", options=["Fever", "Cough", "Nausea"])


def test_number_picker_accepts_in_range_values():
    assert normalize_answer(NUMBER, "37.5") == 37.5
    assert normalize_answer(NUMBER, 120) == 120.0
    assert isinstance(normalize_answer(NUMBER, 5), float)


@pytest.mark.parametrize("raw", [0, 121, "abc", "", None, True, float("nan")])
def test_number_picker_rejects_out_of_range_or_non_numeric(raw):
    with pytest.raises(AnswerRejected):
        normalize_answer(NUMBER, raw)


def test_slider_snaps_to_step():
    assert normalize_answer(SLIDER, 7.3) == 7.5
    assert normalize_answer(SLIDER, "2") == 2.0


def test_slider_rejects_out_of_bounds():
    with pytest.raises(AnswerRejected):
        normalize_answer(SLIDER, 11)


def test_multiple_choice_requires_a_listed_option():
    assert normalize_answer(CHOICE, "Severe") == "Severe"
    with pytest.raises(AnswerRejected):
        normalize_answer(CHOICE, "Terrible")


def test_multi_select_is_order_independent():
    assert normalize_answer(MULTI, ["Nausea", "Fever"]) == ["Fever", "Nausea"]
    assert normalize_answer(MULTI, {"Fever", "Nausea"}) == normalize_answer(MULTI, ("Nausea", "Fever"))


@pytest.mark.parametrize("raw", [[], "Fever", ["Fever", "Rash"], [1]])
def test_multi_select_rejects_empty_or_unknown(raw):
    with pytest.raises(AnswerRejected):
        normalize_answer(MULTI, raw)


def test_date_is_formatted_as_iso_day():
    q = _q(type="date-picker")
    assert normalize_answer(q, date(2024, 3, 9)) == "2024-03-09"
    assert normalize_answer(q, datetime(2024, 3, 9, 14, 30)) == "2024-03-09"
    assert normalize_answer(q, "2024-03-09T10:00:00Z") == "2024-03-09"
    with pytest.raises(AnswerRejected):
        normalize_answer(q, "last tuesday")
    with pytest.raises(AnswerRejected):
        normalize_answer(q, None)


def test_text_is_trimmed_and_must_not_be_blank():
    q = _q(type="text")
    assert normalize_answer(q, "  sharp pain  ") == "sharp pain"
    with pytest.raises(AnswerRejected):
        normalize_answer(q, "   ")


def test_yes_no_is_always_a_string():
    q = _q(type="yes_no")
    assert normalize_answer(q, "Yes") == "Yes"
    assert normalize_answer(q, "no") == "No"
    assert normalize_answer(q, True) == "Yes"
    with pytest.raises(AnswerRejected):
        normalize_answer(q, "maybe")


def test_summary_and_unknown_accept_nothing():
    with pytest.raises(AnswerRejected):
        normalize_answer(_q(type="summary", summary="..."), "ok")
    with pytest.raises(AnswerRejected):
        normalize_answer(_q(type="hologram"), "ok")


@pytest.mark.parametrize(
    "buffer, accepted",
    [("", True), ("4", True), ("42.", True), ("42.5", True), ("121", False), ("0", False), ("4a", False), ("1.2.3", False), ("-3", False)],
)
def test_number_keystrokes(buffer, accepted):
    assert accepts_number_keystroke(NUMBER, buffer) is accepted


def test_negative_keystrokes_allowed_when_min_is_negative():
    q = _q(type="number-picker", min=-10, max=10)
    assert accepts_number_keystroke(q, "-")
    assert accepts_number_keystroke(q, "-5")
    assert not accepts_number_keystroke(q, "-11")


def test_format_answer():
    assert format_answer(7.0) == "7"
    assert format_answer(37.5) == "37.5"
    assert format_answer(["Fever", "Cough"]) == "Fever, Cough"
    assert format_answer("Yes") == "Yes"

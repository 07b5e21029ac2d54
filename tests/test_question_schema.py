import pytest

from mycare.questions import (
    DateQuestion,
    InvalidQuestion,
    MultiSelectQuestion,
    MultipleChoiceQuestion,
    NumberPickerQuestion,
    SliderQuestion,
    SummaryQuestion,
    TextQuestion,
    UnknownQuestion,
    YesNoQuestion,
    parse_question,
)


@pytest.mark.parametrize(
    "raw_type, cls",
    [
        ("number-picker", NumberPickerQuestion),
        ("Multiple-Choice", MultipleChoiceQuestion),
        ("MULTI-SELECT", MultiSelectQuestion),
        ("slider", SliderQuestion),
        ("date", DateQuestion),
        ("date-picker", DateQuestion),
        ("text", TextQuestion),
        ("yes-no", YesNoQuestion),
        ("yes_no", YesNoQuestion),
        (" Yes-No ", YesNoQuestion),
        ("summary", SummaryQuestion),
    ],
)
def test_type_tag_dispatch(raw_type, cls):
    payload = {
        "questionId": "q1",
        "question": "Prompt?",
        "type": raw_type,
        "options": ["A", "B"],
        "min": 0,
        "max": 10,
        "summary": "All done.",
    }
    assert isinstance(parse_question(payload), cls)


def test_slider_fields_and_wire_form():
    q = parse_question(
        {"questionId": "q3", "question": "Pain level?", "type": "slider", "min": 0, "max": 10, "step": 1}
    )
    assert (q.question_id, q.question, q.type) == ("q3", "Pain level?", "slider")
    assert (q.min, q.max, q.step) == (0, 10, 1)
    assert q.to_wire() == {
        "questionId": "q3",
        "question": "Pain level?",
        "type": "slider",
        "min": 0,
        "max": 10,
        "step": 1,
    }


def test_prompt_can_come_from_text_field():
    q = parse_question({"id": "q2", "text": "Any fever?", "type": "yes-no"})
    assert q.question_id == "q2"
    assert q.question == "Any fever?"


def test_irrelevant_fields_are_ignored():
    q = parse_question(
        {"questionId": "q1", "question": "Describe it", "type": "text", "options": ["x"], "min": 3}
    )
    assert q.to_wire() == {"questionId": "q1", "question": "Describe it", "type": "text"}


def test_step_defaults_to_one():
    q = parse_question({"questionId": "q1", "type": "number-picker", "min": 1, "max": 5, "step": None})
    assert q.step == 1


def test_duplicate_options_collapse():
    q = parse_question({"questionId": "q1", "type": "multi-select", "options": ["a", "b", "a"]})
    assert q.options == ["a", "b"]


@pytest.mark.parametrize(
    "payload",
    [
        {"questionId": "q1", "type": "multiple-choice"},
        {"questionId": "q1", "type": "multi-select", "options": []},
        {"questionId": "q1", "type": "slider", "min": 0},
        {"questionId": "q1", "type": "slider", "min": 5, "max": 1},
        {"questionId": "q1", "type": "number-picker", "min": 0, "max": 5, "step": 0},
        {"questionId": "q1", "type": "summary"},
        {"type": "text", "question": "no id"},
    ],
)
def test_missing_or_inconsistent_fields_are_rejected(payload):
    with pytest.raises(InvalidQuestion):
        parse_question(payload)


def test_non_object_payload_is_rejected():
    with pytest.raises(InvalidQuestion):
        parse_question(["not", "a", "dict"])


def test_unknown_type_becomes_fallback_variant():
    q = parse_question({"questionId": "q9", "question": "Upload a photo", "type": "image-upload"})
    assert isinstance(q, UnknownQuestion)
    assert q.type == "image-upload"
    assert not q.answerable


def test_summary_is_not_answerable():
    q = parse_question({"questionId": "s1", "type": "summary", "summary": "You reported a headache."})
    assert not q.answerable
    assert q.to_wire()["summary"] == "You reported a headache."

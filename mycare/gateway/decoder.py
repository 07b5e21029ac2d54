# mycare/gateway/decoder.py
from __future__ import annotations

import json
import re
from typing import Any

from mycare.gateway.base import AgentReply, AgentReplyError, AssessmentReply, QuestionReply
from mycare.questions import InvalidQuestion, parse_question

# ```json ... ``` or ``` ... ```, anywhere in the text
_FENCE = re.compile(r"```(?:[a-zA-Z0-9_-]+)?\s*(.*?)\s*```", re.DOTALL)

# workflow tools wrap the model output as [{"output": "..."}]; never nested deeper in practice
_MAX_ENVELOPES = 5


def strip_code_fences(text: str) -> str:
    """
    Return the body of the first fenced block, or the stripped text if
    there is none. Handles a missing closing fence too.
    """
    stripped = text.strip()
    match = _FENCE.search(stripped)
    if match:
        return match.group(1).strip()
    if stripped.startswith("```"):
        stripped = stripped.lstrip("`")
        if stripped.lower().startswith("json"):
            stripped = stripped[4:]
        stripped = stripped.rstrip("`").strip()
    return stripped


def _loads(text: str) -> Any:
    stripped = text.strip()
    if not stripped:
        raise AgentReplyError("Agent reply is empty")
    try:
        return json.loads(stripped)
    except json.JSONDecodeError:
        pass
    # fences are only looked for once plain JSON has failed, so fences
    # quoted inside a JSON string are left to the next envelope
    body = strip_code_fences(stripped)
    try:
        return json.loads(body)
    except json.JSONDecodeError as exc:
        raise AgentReplyError(f"Agent reply is not valid JSON: {exc.msg}") from exc


def unwrap(raw: Any) -> Any:
    """
    Peel transport envelopes until a plain JSON object remains:
    bytes -> text -> JSON, [x] -> x, {"output": "..."} -> decoded output.
    """
    value = raw
    for _ in range(_MAX_ENVELOPES + 1):
        if isinstance(value, (bytes, bytearray)):
            value = value.decode("utf-8", errors="replace")
        if isinstance(value, str):
            value = _loads(value)
            continue
        if isinstance(value, list):
            if not value:
                raise AgentReplyError("Agent reply is an empty list")
            value = value[0]
            continue
        if isinstance(value, dict) and "output" in value and not _is_reply(value):
            value = value["output"]
            continue
        return value
    raise AgentReplyError("Agent reply is wrapped too deeply")


def _is_reply(obj: dict) -> bool:
    return "finalDiagnosis" in obj or "questionId" in obj or "type" in obj


def decode_agent_reply(raw: Any) -> AgentReply:
    """
    The one place agent output is turned into a question or an assessment.
    Anything that does not fit raises AgentReplyError.
    """
    obj = unwrap(raw)
    if not isinstance(obj, dict):
        raise AgentReplyError(f"Agent reply must be a JSON object, got {type(obj).__name__}")

    # only a non-empty finalDiagnosis ends the interview; anything else is a question
    diagnosis = obj.get("finalDiagnosis")
    if isinstance(diagnosis, str) and diagnosis.strip():
        recommendations = obj.get("recommendations") or []
        if not isinstance(recommendations, list):
            recommendations = [recommendations]
        return AssessmentReply(
            text=diagnosis,
            recommendations=[str(r) for r in recommendations],
        )

    try:
        question = parse_question(obj)
    except InvalidQuestion as exc:
        raise AgentReplyError(str(exc)) from exc
    return QuestionReply(question=question)

# mycare/gateway/llm.py
from __future__ import annotations

import json
import logging
from typing import Dict, List

from mycare.gateway.base import (
    AgentGateway,
    AgentReply,
    AgentTransportError,
    SessionContext,
)
from mycare.gateway.decoder import decode_agent_reply
from mycare.llm import LLMClient, LLMError

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """
You are a medical intake assistant. A patient describes a health complaint and
you ask ONE follow-up question at a time, the way a doctor would, adapting each
question to the answers given so far. After roughly 7-8 questions (fewer if the
picture is already clear) you stop and give a preliminary assessment.

Every reply must be a single JSON object, either a question:

{
  "questionId": "q<N>",
  "question": string,
  "type": "multiple-choice" | "multi-select" | "yes-no" | "slider"
          | "number-picker" | "date" | "text",
  "options": [string, ...],      // multiple-choice and multi-select only
  "min": number, "max": number,  // slider and number-picker only
  "step": number                 // slider and number-picker only
}

or the final assessment:

{
  "finalDiagnosis": string,
  "recommendations": [string, ...]
}

Number questions sequentially (q1, q2, ...). Do not repeat a question that
has already been answered. The assessment is preliminary: recommend seeing a
clinician, and urge emergency care for red-flag symptoms.

IMPORTANT: Return ONLY the JSON object, without any markdown formatting or
additional text.
""".strip()


def _answers_text(context: SessionContext) -> str:
    if not context.answers:
        return "(no answers yet)"
    return json.dumps(context.answers_payload(), indent=2, ensure_ascii=False)


def _transcript_text(context: SessionContext) -> str:
    if not context.messages:
        return "(empty)"
    return "\n".join(f"{m.role}: {m.content}" for m in context.messages)


def build_messages(context: SessionContext) -> List[Dict[str, str]]:
    """
    System prompt + the patient's complaint + the transcript + the
    structured answers so far.
    """
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {
            "role": "user",
            "content": (
                f"Patient's complaint: {context.main_question}\n\n"
                "Conversation so far:\n"
                f"{_transcript_text(context)}\n\n"
                "Questions answered so far:\n"
                f"{_answers_text(context)}\n\n"
                "Reply with the next question, or with the final assessment "
                "if you have enough information."
            ),
        },
    ]


class LLMAgentGateway(AgentGateway):
    """
    Asks a chat-completion model directly for the next step.
    """

    def __init__(self, llm_client: LLMClient, temperature: float = 0.7):
        self.llm_client = llm_client
        self.temperature = temperature

    def send(self, context: SessionContext) -> AgentReply:
        messages = build_messages(context)
        try:
            raw = self.llm_client.chat(messages, temperature=self.temperature)
        except LLMError as exc:
            raise AgentTransportError(str(exc)) from exc

        logger.debug("LLM raw reply for session %s: %s", context.session_id, raw)
        return decode_agent_reply(raw)

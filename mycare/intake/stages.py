# mycare/intake/stages.py
from enum import Enum


class Phase(str, Enum):
    AWAITING_FIRST_QUERY = "awaiting_first_query"
    AWAITING_AGENT_REPLY = "awaiting_agent_reply"
    AWAITING_ANSWER = "awaiting_answer"
    TERMINAL = "terminal"

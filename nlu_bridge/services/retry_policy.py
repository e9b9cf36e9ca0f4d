import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from nlu_bridge.schemas.dialogflow import DialogflowContext

UNKNOWN_UTTERANCE_CONTEXT = "unknownutterance"
RETRIES_LEFT_PARAM = "retriesLeft"


class FallbackAction(str, Enum):
    ANSWER = "answer"  # NLU matched, show its answer
    REPEAT = "repeat"  # ask the user to rephrase
    HANDOFF = "handoff"  # transfer to a live agent


@dataclass(frozen=True)
class FallbackDecision:
    action: FallbackAction
    retries_left: Optional[int]  # value to store, None leaves the context untouched


def normalize_retries(value: Any, initial_retries: int) -> int:
    """Coerce a stored retriesLeft into the range [0, initial_retries].

    Dialogflow hands numeric parameters back as floats, so 1.0 is accepted.
    Anything unusable counts as a fresh counter.
    """
    if isinstance(value, bool) or value is None:
        return initial_retries
    if isinstance(value, str):
        try:
            value = float(value)
        except ValueError:
            return initial_retries
    if isinstance(value, int):
        return min(max(value, 0), initial_retries)
    if not isinstance(value, float) or math.isnan(value):
        return initial_retries
    if math.isinf(value):
        return 0 if value < 0 else initial_retries
    if not value.is_integer():
        return initial_retries
    return min(max(int(value), 0), initial_retries)


def read_retries_left(context: Optional[DialogflowContext], initial_retries: int) -> int:
    """retriesLeft from the unknown-utterance context, initial_retries when there is none."""
    if context is None:
        return initial_retries
    return normalize_retries(context.parameters.get(RETRIES_LEFT_PARAM), initial_retries)


def decide_fallback(matched: bool, retries_left: int, initial_retries: int) -> FallbackDecision:
    """Escalation step for one fallback turn."""
    if matched:
        return FallbackDecision(FallbackAction.ANSWER, initial_retries)
    if retries_left <= 0:
        return FallbackDecision(FallbackAction.HANDOFF, None)
    return FallbackDecision(FallbackAction.REPEAT, retries_left - 1)


def retries_parameters(retries_left: int) -> dict:
    return {RETRIES_LEFT_PARAM: retries_left}

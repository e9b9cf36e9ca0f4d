from typing import Any

import httpx

from nlu_bridge.logging_config import get_logger
from nlu_bridge.schemas.nlu import ChatbotDescriptor, NLURequest, NLUResponse

logger = get_logger("nlu_service")

FAILURE_MARKER = "Oh No, looks like something is wrong"
PARTIAL_MATCH_MARKER = "I am not sure I understand"
GENERIC_FAILURE_MESSAGE = "There seems to be a problem. Please try again later."
ANSWER_SEPARATOR = ","
EXIT_UTTERANCE = "exit"
DEFAULT_TIMEOUT_SECONDS = 30.0


def is_matched(answer: str) -> bool:
    """False when the NLU service reports it could not match the utterance."""
    return FAILURE_MARKER not in answer


def is_partial_match(answer: str) -> bool:
    """True when the NLU service offers several candidate answers instead of one."""
    return PARTIAL_MATCH_MARKER in answer


def extract_answer(data: Any) -> str:
    """Pick the answer text out of an /ivr/receive response body.

    Raises ValueError when the body has no usable answers.
    """
    parsed = NLUResponse.model_validate(data)
    if not parsed.answers:
        raise ValueError("NLU response contains no answers")

    answer = parsed.answers[0].text
    if is_partial_match(answer):
        answer = ANSWER_SEPARATOR.join(item.text for item in parsed.answers)
    return answer


class NLUClient:
    """Client for the external NLU service."""

    ENDPOINT = "https://{host}/ivr/receive"

    def __init__(self, timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS):
        self.timeout_seconds = timeout_seconds

    async def ask(self, utterance: str, chatbot: ChatbotDescriptor, user: str) -> str:
        """Send an utterance to the bot and return its answer text.

        Never raises: any failure is logged and answered with GENERIC_FAILURE_MESSAGE.
        """
        url = self.ENDPOINT.format(host=chatbot.host)
        body = NLURequest(userId=user, channelId=chatbot.channel_id, text=utterance)

        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                response = await client.post(
                    url,
                    headers={
                        "Authorization": chatbot.auth_header,
                        "Content-Type": "application/json",
                    },
                    json=body.model_dump(),
                )
                response.raise_for_status()
                data = response.json()

            answer = extract_answer(data)
            logger.debug(f"NLU answer from {chatbot.host}: {answer[:100]}")
            return answer
        except Exception as e:
            logger.error(
                "Error connecting to NLU server",
                extra={"context": {"host": chatbot.host, "user": user, "error": repr(e)}},
            )
            return GENERIC_FAILURE_MESSAGE

    async def reset_conversation(self, chatbot: ChatbotDescriptor, user: str) -> str:
        """Clear the conversation state the NLU service keeps for this user."""
        return await self.ask(EXIT_UTTERANCE, chatbot, user)

from unittest.mock import AsyncMock, Mock

import pytest

from nlu_bridge.config import Settings
from nlu_bridge.schemas.dialogflow import WebhookRequest
from nlu_bridge.schemas.nlu import BotIdentity, ChatbotDescriptor
from nlu_bridge.services.credentials_service import CredentialsTable
from nlu_bridge.services.nlu_service import NLUClient

SESSION = "projects/test-agent/agent/sessions/session-123"
WELCOME = "Default Welcome Intent"
FALLBACK = "Default Fallback Intent"
NLU_FAILURE = "Oh No, looks like something is wrong. Let me try again."

DEV0 = ChatbotDescriptor(host="dev0.example.com", channel_id="42", auth_header="Basic dev0")


def build_payload(intent: str, query: str = "hello", retries_left=None, payload: dict | None = None) -> dict:
    """Dialogflow v2 webhook request body."""
    contexts = []
    if retries_left is not None:
        contexts.append(
            {
                "name": f"{SESSION}/contexts/unknownutterance",
                "lifespanCount": 49,
                "parameters": {"retriesLeft": retries_left},
            }
        )
    return {
        "responseId": "response-1",
        "session": SESSION,
        "queryResult": {
            "queryText": query,
            "languageCode": "en",
            "parameters": {},
            "intent": {"name": f"projects/test-agent/agent/intents/{intent}", "displayName": intent},
            "intentDetectionConfidence": 1.0,
            "outputContexts": contexts,
        },
        "originalDetectIntentRequest": {"source": "DIALOGFLOW_CONSOLE", "payload": payload or {}},
    }


def build_request(*args, **kwargs) -> WebhookRequest:
    return WebhookRequest.model_validate(build_payload(*args, **kwargs))


@pytest.fixture
def settings():
    return Settings(
        initial_retries=1,
        unknown_utterance_lifespan=50,
        nlu_timeout_seconds=5.0,
        default_user="alexorf",
        default_chatbot="dev0",
    )


@pytest.fixture
def credentials():
    return CredentialsTable(users={"alexorf": "alexorf-id"}, chatbots={"dev0": DEV0})


@pytest.fixture
def identity():
    return BotIdentity(user="alexorf-id", chatbot=DEV0)


@pytest.fixture
def nlu():
    """NLU client double; set nlu.ask.return_value per test."""
    client = Mock(spec=NLUClient)
    client.ask = AsyncMock(return_value="An answer")
    client.reset_conversation = AsyncMock(return_value="Bye")
    return client

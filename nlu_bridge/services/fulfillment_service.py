import time
from enum import Enum
from typing import Optional

from nlu_bridge.config import Settings
from nlu_bridge.logging_config import TurnLogger, get_logger
from nlu_bridge.schemas.dialogflow import WebhookResponse
from nlu_bridge.schemas.nlu import BotIdentity
from nlu_bridge.services.nlu_service import NLUClient, is_matched
from nlu_bridge.services.retry_policy import (
    UNKNOWN_UTTERANCE_CONTEXT,
    FallbackAction,
    decide_fallback,
    read_retries_left,
    retries_parameters,
)
from nlu_bridge.services.webhook_agent import WebhookAgent

logger = get_logger("fulfillment_service")

HANDOFF_EVENT = "TalkToAgent"

MSG_WELCOME = "Welcome, how can i help?"
MSG_REPEAT = "Could you please repeat that?"
# Overridden by the hand-off event, but the platform rejects a reply without messages
MSG_HANDOFF = "Please hold, you will be connected to a live agent shortly"


class FulfillmentIntent(str, Enum):
    DEFAULT_WELCOME = "Default Welcome Intent"
    FALLBACK = "Default Fallback Intent"
    HANDLED = "Handled Intent"
    ESCALATED = "Escalation Intent"


def parse_intent(display_name: str) -> Optional[FulfillmentIntent]:
    try:
        return FulfillmentIntent(display_name)
    except ValueError:
        return None


def reset_unknown_utterance_retries(agent: WebhookAgent, settings: Settings) -> None:
    """Give the user a full set of retries before the next hand-off."""
    agent.context.set(
        UNKNOWN_UTTERANCE_CONTEXT,
        settings.unknown_utterance_lifespan,
        retries_parameters(settings.initial_retries),
    )


async def welcome(agent: WebhookAgent, identity: BotIdentity, nlu: NLUClient, settings: Settings) -> None:
    log = TurnLogger(logger, {"session": agent.session})

    reset_unknown_utterance_retries(agent, settings)
    reset_answer = await nlu.reset_conversation(identity.chatbot, identity.user)
    log.debug("NLU conversation reset", context={"answer": reset_answer})

    agent.add(MSG_WELCOME)


async def fallback(agent: WebhookAgent, identity: BotIdentity, nlu: NLUClient, settings: Settings) -> None:
    log = TurnLogger(logger, {"session": agent.session})

    start = time.perf_counter()
    answer = await nlu.ask(agent.query, identity.chatbot, identity.user)
    matched = is_matched(answer)

    retries_left = read_retries_left(agent.context.get(UNKNOWN_UTTERANCE_CONTEXT), settings.initial_retries)
    decision = decide_fallback(matched, retries_left, settings.initial_retries)

    if decision.action == FallbackAction.ANSWER:
        reset_unknown_utterance_retries(agent, settings)
        agent.add(answer)
    elif decision.action == FallbackAction.HANDOFF:
        agent.set_followup_event(HANDOFF_EVENT)
        agent.add(MSG_HANDOFF)
        log.info("Handing off to live agent", context={"query": agent.query})
    else:
        agent.context.set(
            UNKNOWN_UTTERANCE_CONTEXT,
            settings.unknown_utterance_lifespan,
            retries_parameters(decision.retries_left),
        )
        agent.add(MSG_REPEAT)

    elapsed_ms = (time.perf_counter() - start) * 1000
    log.info(
        f'Query "{agent.query}" answered in {elapsed_ms:.0f}ms',
        context={"action": decision.action.value, "retries_left": decision.retries_left},
    )


async def handle_request(
    agent: WebhookAgent, identity: BotIdentity, nlu: NLUClient, settings: Settings
) -> WebhookResponse:
    """Run the handler for the matched intent and build the webhook reply.

    Unhandled intents get an empty reply, so the platform falls back to the
    responses configured on the intent itself.
    """
    intent = parse_intent(agent.intent)

    if intent == FulfillmentIntent.DEFAULT_WELCOME:
        await welcome(agent, identity, nlu, settings)
    elif intent == FulfillmentIntent.FALLBACK:
        await fallback(agent, identity, nlu, settings)
    else:
        logger.debug(f"No handler for intent '{agent.intent}'")

    return agent.build_response()

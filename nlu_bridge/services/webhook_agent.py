from typing import Any, Optional

from nlu_bridge.schemas.dialogflow import (
    DialogflowContext,
    EventInput,
    FulfillmentMessage,
    TextMessage,
    WebhookRequest,
    WebhookResponse,
)

DEFAULT_LOCALE = "en"


def short_context_name(name: str) -> str:
    """'projects/p/agent/sessions/s/contexts/foo' -> 'foo'."""
    return name.rsplit("/contexts/", 1)[-1].lower()


class ContextStore:
    """Conversation contexts of a single webhook call.

    Reads see contexts set during this call first, then the ones the platform
    sent in. Only contexts set during the call are written back.
    """

    def __init__(self, session: str, input_contexts: list[DialogflowContext]):
        self.session = session
        self._input = {short_context_name(ctx.name): ctx for ctx in input_contexts}
        self._output: dict[str, DialogflowContext] = {}

    def full_name(self, name: str) -> str:
        return f"{self.session}/contexts/{name.lower()}"

    def get(self, name: str) -> Optional[DialogflowContext]:
        key = name.lower()
        return self._output.get(key) or self._input.get(key)

    def set(self, name: str, lifespan: int, parameters: Optional[dict[str, Any]] = None) -> DialogflowContext:
        context = DialogflowContext(
            name=self.full_name(name),
            lifespanCount=lifespan,
            parameters=dict(parameters or {}),
        )
        self._output[name.lower()] = context
        return context

    def outgoing(self) -> list[DialogflowContext]:
        return list(self._output.values())


class WebhookAgent:
    """Request-scoped view of a webhook call: what was matched, and what to answer."""

    def __init__(self, request: WebhookRequest):
        query_result = request.queryResult
        original = request.originalDetectIntentRequest

        self.session = request.session
        self.intent = query_result.intent.displayName if query_result.intent else ""
        self.query = query_result.queryText
        self.locale = query_result.languageCode or DEFAULT_LOCALE
        self.payload: dict[str, Any] = original.payload if original else {}
        self.context = ContextStore(request.session, query_result.outputContexts)

        self._messages: list[str] = []
        self._followup_event: Optional[EventInput] = None

    @property
    def messages(self) -> list[str]:
        return list(self._messages)

    @property
    def followup_event(self) -> Optional[EventInput]:
        return self._followup_event

    def add(self, text: str) -> None:
        self._messages.append(text)

    def set_followup_event(self, name: str, parameters: Optional[dict[str, Any]] = None) -> None:
        self._followup_event = EventInput(name=name, languageCode=self.locale, parameters=parameters)

    def build_response(self) -> WebhookResponse:
        response = WebhookResponse()
        if self._messages:
            response.fulfillmentText = self._messages[0]
            response.fulfillmentMessages = [
                FulfillmentMessage(text=TextMessage(text=[message])) for message in self._messages
            ]
        outgoing = self.context.outgoing()
        if outgoing:
            response.outputContexts = outgoing
        if self._followup_event:
            response.followupEventInput = self._followup_event
        return response

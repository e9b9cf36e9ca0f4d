"""Dialogflow ES (v2) webhook request and response payloads.

Only the fields the bridge reads or writes are modelled; anything else in the
inbound JSON is ignored.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class DialogflowIntent(BaseModel):
    name: Optional[str] = None
    displayName: str = ""


class DialogflowContext(BaseModel):
    name: str  # full path: projects/<p>/agent/sessions/<s>/contexts/<context>
    lifespanCount: Optional[int] = None
    parameters: dict[str, Any] = Field(default_factory=dict)


class QueryResult(BaseModel):
    queryText: str = ""
    languageCode: Optional[str] = None
    parameters: dict[str, Any] = Field(default_factory=dict)
    intent: Optional[DialogflowIntent] = None
    intentDetectionConfidence: Optional[float] = None
    outputContexts: list[DialogflowContext] = Field(default_factory=list)


class OriginalDetectIntentRequest(BaseModel):
    source: Optional[str] = None
    version: Optional[str] = None
    payload: dict[str, Any] = Field(default_factory=dict)


class WebhookRequest(BaseModel):
    responseId: Optional[str] = None
    session: str
    queryResult: QueryResult
    originalDetectIntentRequest: Optional[OriginalDetectIntentRequest] = None

    model_config = ConfigDict(extra="ignore")


class TextMessage(BaseModel):
    text: list[str]


class FulfillmentMessage(BaseModel):
    text: TextMessage


class EventInput(BaseModel):
    name: str
    languageCode: str = "en"
    parameters: Optional[dict[str, Any]] = None


class WebhookResponse(BaseModel):
    fulfillmentText: Optional[str] = None
    fulfillmentMessages: Optional[list[FulfillmentMessage]] = None
    outputContexts: Optional[list[DialogflowContext]] = None
    followupEventInput: Optional[EventInput] = None

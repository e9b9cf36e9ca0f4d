from nlu_bridge.schemas.dialogflow import WebhookRequest, WebhookResponse
from nlu_bridge.schemas.nlu import BotIdentity, ChatbotDescriptor

__all__ = ["WebhookRequest", "WebhookResponse", "BotIdentity", "ChatbotDescriptor"]

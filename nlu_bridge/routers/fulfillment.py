from fastapi import APIRouter, Depends, HTTPException

from nlu_bridge.config import Settings, get_settings
from nlu_bridge.logging_config import get_logger
from nlu_bridge.schemas.dialogflow import WebhookRequest, WebhookResponse
from nlu_bridge.services.credentials_service import (
    CredentialsError,
    CredentialsTable,
    get_credentials,
    resolve_identity,
)
from nlu_bridge.services.fulfillment_service import handle_request
from nlu_bridge.services.nlu_service import NLUClient
from nlu_bridge.services.webhook_agent import WebhookAgent

logger = get_logger("fulfillment_router")

router = APIRouter()


def require_credentials(settings: Settings = Depends(get_settings)) -> CredentialsTable:
    try:
        return get_credentials(settings)
    except CredentialsError as e:
        logger.error(e.message, extra={"context": {"credentials_path": settings.credentials_path}})
        raise HTTPException(status_code=500, detail=e.message)


def get_nlu_client(settings: Settings = Depends(get_settings)) -> NLUClient:
    return NLUClient(timeout_seconds=settings.nlu_timeout_seconds)


@router.post("/", response_model=WebhookResponse, response_model_exclude_none=True)
@router.post("/fulfillment", response_model=WebhookResponse, response_model_exclude_none=True)
async def handle_fulfillment(
    request: WebhookRequest,
    settings: Settings = Depends(get_settings),
    credentials: CredentialsTable = Depends(require_credentials),
    nlu: NLUClient = Depends(get_nlu_client),
):
    """Dialogflow fulfillment webhook."""
    agent = WebhookAgent(request)

    try:
        identity = resolve_identity(agent.payload, settings, credentials)
    except CredentialsError as e:
        logger.error(e.message, extra={"context": {"session": agent.session, "intent": agent.intent}})
        raise HTTPException(status_code=500, detail=e.message)

    return await handle_request(agent, identity, nlu, settings)

from nlu_bridge.services.fulfillment_service import (
    FulfillmentIntent,
    fallback,
    handle_request,
    welcome,
)
from nlu_bridge.services.nlu_service import NLUClient, is_matched, is_partial_match
from nlu_bridge.services.retry_policy import (
    FallbackAction,
    FallbackDecision,
    decide_fallback,
    read_retries_left,
)

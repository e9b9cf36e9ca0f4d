from fastapi import FastAPI

from nlu_bridge.config import settings
from nlu_bridge.logging_config import get_logger, setup_logging
from nlu_bridge.routers import fulfillment

setup_logging(settings.log_level, debug=settings.debug)

logger = get_logger("main")

app = FastAPI(
    title="NLU Bridge",
    description="Dialogflow fulfillment webhook forwarding unmatched utterances to an external NLU service",
    version="0.1.0",
)

app.include_router(fulfillment.router)


@app.get("/health")
async def health():
    return {"status": "ok"}


def run() -> None:
    import uvicorn

    logger.info(
        f"NLU bridge listening on port {settings.port}. Connected to bot {settings.default_chatbot}",
        extra={"context": {"host": settings.host, "port": settings.port}},
    )
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    run()

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    initial_retries: int = Field(default=1, ge=0)
    unknown_utterance_lifespan: int = Field(default=50, ge=1)
    nlu_timeout_seconds: float = Field(default=30.0, gt=0)

    credentials_path: str = "credentials.yaml"
    default_user: str = "alexorf"
    default_chatbot: str = "dev0"

    # Env overrides for the defaults above, take precedence over the credentials file
    default_user_id: Optional[str] = None
    default_chatbot_host: Optional[str] = None
    default_chatbot_channel_id: Optional[str] = None
    default_chatbot_auth_header: Optional[str] = None

    host: str = "0.0.0.0"
    port: int = 3001
    log_level: str = "INFO"
    debug: bool = False

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()


def get_settings() -> Settings:
    return settings

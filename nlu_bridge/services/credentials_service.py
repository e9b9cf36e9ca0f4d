"""Bot identity resolution.

The inbound payload may carry a ``user`` and a ``chatbot`` descriptor. Whatever
it leaves out is filled from the configured defaults: explicit env settings
first, then the named entries of the credentials file.

credentials.yaml::

    users:
      alexorf: alexorf@example.com
    chatbots:
      dev0:
        host: dev0.example.com
        channel_id: "1234"
        auth_header: Basic xxxx
"""

import json
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import ValidationError

from nlu_bridge.config import Settings
from nlu_bridge.logging_config import get_logger
from nlu_bridge.schemas.nlu import BotIdentity, ChatbotDescriptor
from nlu_bridge.services.result import Result

logger = get_logger("credentials_service")


class CredentialsError(Exception):
    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


@dataclass(frozen=True)
class CredentialsTable:
    users: dict[str, str] = field(default_factory=dict)
    chatbots: dict[str, ChatbotDescriptor] = field(default_factory=dict)

    def user(self, name: str) -> Optional[str]:
        return self.users.get(name)

    def chatbot(self, name: str) -> Optional[ChatbotDescriptor]:
        return self.chatbots.get(name)


def _load_yaml(path: Path) -> dict:
    try:
        mtime_ns = path.stat().st_mtime_ns
    except FileNotFoundError:
        logger.warning(f"Credentials file not found: {path}")
        return {}
    return _read_yaml(path, mtime_ns)


@lru_cache(maxsize=4)
def _read_yaml(path: Path, mtime_ns: int) -> dict:
    """Parsed file contents, cached until the file's mtime changes."""
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
    except yaml.YAMLError as e:
        raise CredentialsError(f"Invalid credentials file {path}: {e}")
    return data if isinstance(data, dict) else {}


def load_credentials(path: str | Path) -> CredentialsTable:
    data = _load_yaml(Path(path))

    raw_users = data.get("users")
    users = {str(name): str(value) for name, value in raw_users.items()} if isinstance(raw_users, dict) else {}

    chatbots: dict[str, ChatbotDescriptor] = {}
    raw_chatbots = data.get("chatbots")
    if isinstance(raw_chatbots, dict):
        for name, value in raw_chatbots.items():
            try:
                chatbots[str(name)] = ChatbotDescriptor.model_validate(value)
            except ValidationError as e:
                # Skip the broken entry, keep the rest of the table usable
                logger.error(f"Invalid chatbot entry '{name}' in {path}: {e}")

    return CredentialsTable(users=users, chatbots=chatbots)


def get_credentials(settings: Settings) -> CredentialsTable:
    """Credentials table for the configured path.

    Raises CredentialsError when the file exists but is not valid YAML.
    """
    return load_credentials(settings.credentials_path)


def parse_user(raw: Any) -> Result[str]:
    if raw is None or raw == "":
        return Result.missing("user")
    if isinstance(raw, bool) or not isinstance(raw, (str, int)):
        return Result.failure(f"user must be a string, got {type(raw).__name__}", "malformed_user")
    return Result.success(str(raw))


def parse_chatbot(raw: Any) -> Result[ChatbotDescriptor]:
    """Parse the payload's chatbot field, a JSON-encoded string or an object."""
    if raw is None or raw == "" or raw == {}:
        return Result.missing("chatbot")

    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as e:
            return Result.failure(f"chatbot is not valid JSON: {e}", "malformed_chatbot")
        if raw is None:
            return Result.missing("chatbot")

    try:
        return Result.success(ChatbotDescriptor.model_validate(raw))
    except ValidationError as e:
        return Result.failure(f"chatbot has an invalid shape: {e.error_count()} error(s)", "malformed_chatbot")


def default_user(settings: Settings, credentials: CredentialsTable) -> str:
    user = settings.default_user_id or credentials.user(settings.default_user)
    if not user:
        raise CredentialsError(f"No default user configured (looked up '{settings.default_user}')")
    return user


def default_chatbot(settings: Settings, credentials: CredentialsTable) -> ChatbotDescriptor:
    if settings.default_chatbot_host and settings.default_chatbot_channel_id and settings.default_chatbot_auth_header:
        return ChatbotDescriptor(
            host=settings.default_chatbot_host,
            channel_id=settings.default_chatbot_channel_id,
            auth_header=settings.default_chatbot_auth_header,
        )
    chatbot = credentials.chatbot(settings.default_chatbot)
    if chatbot is None:
        raise CredentialsError(f"No default chatbot configured (looked up '{settings.default_chatbot}')")
    return chatbot


def _log_fallback(result: Result, field_name: str) -> None:
    if result.is_missing:
        logger.debug(f"No {field_name} in payload, using default")
    else:
        logger.warning(
            f"Ignoring malformed {field_name} in payload, using default",
            extra={"context": {"error": result.error, "error_code": result.error_code}},
        )


def resolve_identity(payload: dict, settings: Settings, credentials: CredentialsTable) -> BotIdentity:
    """Build the bot identity for one request.

    Raises CredentialsError if a default is needed but none is configured.
    """
    user_result = parse_user(payload.get("user"))
    if not user_result.ok:
        _log_fallback(user_result, "user")

    chatbot_result = parse_chatbot(payload.get("chatbot"))
    if not chatbot_result.ok:
        _log_fallback(chatbot_result, "chatbot")

    return BotIdentity(
        user=user_result.unwrap_or_else(lambda: default_user(settings, credentials)),
        chatbot=chatbot_result.unwrap_or_else(lambda: default_chatbot(settings, credentials)),
    )

from __future__ import annotations
import json
import logging
import os
from typing import Any, Dict, Optional, Tuple, Type

from pydantic.fields import FieldInfo
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

logger = logging.getLogger("loginverify")

DEFAULT_MAIL_FROM = "no-reply@example.com"
DEFAULT_VERIFY_BASE_URL = "https://example.com"

# settings field -> dotted key in the runtime config document
RUNTIME_KEYS = {
    "sendgrid_api_key": "sendgrid.key",
    "mail_from": "mail.from",
    "verify_base_url": "verify.base_url",
}

def load_runtime_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Nested JSON sections, e.g. {"sendgrid": {"key": "..."}, "mail": {"from": "..."}}.
    Missing or unreadable file -> {} (startup never fails on it).
    """
    path = path or os.getenv("RUNTIME_CONFIG", ".runtimeconfig.json")
    if not os.path.isfile(path):
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning(f"Ignoring runtime config {path}: {e}")
        return {}
    if not isinstance(data, dict):
        logger.warning(f"Ignoring runtime config {path}: top level is not an object")
        return {}
    return data

def runtime_value(runtime: Dict[str, Any], dotted_key: str) -> str:
    node: Any = runtime
    for part in dotted_key.split("."):
        if not isinstance(node, dict):
            return ""
        node = node.get(part)
    if node is None or isinstance(node, (dict, list)):
        return ""
    return str(node)

class RuntimeConfigSource(PydanticBaseSettingsSource):
    """Ranks below the environment; empty values fall through to defaults."""

    def __init__(self, settings_cls: Type[BaseSettings]):
        super().__init__(settings_cls)
        self.runtime = load_runtime_config()

    def get_field_value(self, field: FieldInfo, field_name: str) -> Tuple[Any, str, bool]:
        key = RUNTIME_KEYS.get(field_name)
        value = runtime_value(self.runtime, key) if key else ""
        return (value or None), field_name, False

    def __call__(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        for field_name, field in self.settings_cls.model_fields.items():
            value, key, _ = self.get_field_value(field, field_name)
            if value is not None:
                data[key] = value
        return data

class Settings(BaseSettings):
    app_host: str = "0.0.0.0"
    app_port: int = 8080
    db_url: str = "sqlite:///./data/verifications.db"
    log_level: str = "INFO"
    allowed_origins: str = "*"
    sendgrid_api_key: str = ""
    sendgrid_api_url: str = "https://api.sendgrid.com/v3/mail/send"
    mail_from: str = DEFAULT_MAIL_FROM
    mail_timeout_s: float = 10.0
    verify_base_url: str = DEFAULT_VERIFY_BASE_URL

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_ignore_empty=True,
        extra="ignore",
        frozen=True,
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        # kwargs > env (non-empty) > .env > runtime config > defaults
        return init_settings, env_settings, dotenv_settings, RuntimeConfigSource(settings_cls)

def load_settings() -> Settings:
    return Settings()

settings = load_settings()

def get_settings() -> Settings:
    return settings

"""Server configuration via environment variables."""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from .prompts.dream import DEFAULT_PROMPT_TEMPLATE

VALID_RESOLUTIONS = {"720p", "1080p"}
VALID_ASPECT_RATIOS = {"16:9", "9:16"}

# Capability table keyed by exact model identifier. Older Veo families reject
# the ``resolution`` parameter with 400 INVALID_ARGUMENT.
VEO_MODELS: dict[str, dict[str, str | bool]] = {
    "veo-3.1-generate-preview": {
        "label": "Veo 3.1 (High Quality - Slow)",
        "supports_resolution": True,
    },
    "veo-3.1-fast-generate-preview": {
        "label": "Veo 3.1 Fast (Turbo - Recommended)",
        "supports_resolution": True,
    },
    "veo-3.0-generate-001": {
        "label": "Veo 3.0 (Standard)",
        "supports_resolution": False,
    },
    "veo-3.0-fast-generate-001": {
        "label": "Veo 3.0 Fast (Turbo)",
        "supports_resolution": False,
    },
    "veo-2.0-generate-001": {
        "label": "Veo 2.0 (Legacy)",
        "supports_resolution": False,
    },
}

DEFAULT_VEO_MODEL = "veo-3.1-generate-preview"


def _is_env_placeholder(value: str) -> bool:
    """Return True when *value* looks like an unresolved shell placeholder."""
    if value.startswith("${") and value.endswith("}"):
        inner = value[2:-1].strip()
        if ":-" in inner:
            inner = inner.split(":-", 1)[0].strip()
        return bool(inner) and all(ch.isalnum() or ch == "_" for ch in inner)
    if value.startswith("$"):
        inner = value[1:].strip()
        return bool(inner) and all(ch.isalnum() or ch == "_" for ch in inner)
    return False


def _env_str(name: str, default: str) -> str:
    """Read a string env var, treating blanks and placeholders as unset."""
    value = os.getenv(name, "").strip()
    if not value or _is_env_placeholder(value):
        return default
    return value


def _resolve_tracing_enabled(flag_value: str, tracking_uri: str) -> bool:
    """Derive tracing_enabled from env vars.

    - ``GEMINI_TRACING_ENABLED=false`` → always disabled (explicit opt-out).
    - Otherwise enabled when ``MLFLOW_TRACKING_URI`` is non-empty.
    """
    if flag_value.lower() == "false":
        return False
    return bool(tracking_uri)


class ServerConfig(BaseModel):
    """Runtime configuration resolved from environment."""

    gemini_api_key: str = Field(default="")
    veo_model: str = Field(default=DEFAULT_VEO_MODEL)
    resolution: str = Field(default="1080p")
    aspect_ratio: str = Field(default="16:9")
    concurrency_limit: int = Field(default=2)
    poll_interval_seconds: float = Field(default=10.0)
    max_poll_seconds: float = Field(default=0.0)
    download_timeout_seconds: float = Field(default=120.0)
    media_dir: str = Field(default="")
    prompt_template: str = Field(default=DEFAULT_PROMPT_TEMPLATE)
    retry_max_attempts: int = Field(default=3)
    retry_base_delay: float = Field(default=1.0)
    retry_max_delay: float = Field(default=60.0)
    tracing_enabled: bool = Field(default=False)
    mlflow_tracking_uri: str = Field(default="")
    mlflow_experiment_name: str = Field(default="dream-sequence-mcp")

    @field_validator("veo_model")
    @classmethod
    def validate_veo_model(cls, value: str) -> str:
        model = value.strip()
        if model not in VEO_MODELS:
            allowed = ", ".join(sorted(VEO_MODELS))
            raise ValueError(f"Unknown Veo model '{value}'. Allowed: {allowed}")
        return model

    @field_validator("resolution")
    @classmethod
    def validate_resolution(cls, value: str) -> str:
        if value not in VALID_RESOLUTIONS:
            raise ValueError(f"Invalid resolution '{value}'. Allowed: 1080p, 720p")
        return value

    @field_validator("aspect_ratio")
    @classmethod
    def validate_aspect_ratio(cls, value: str) -> str:
        if value not in VALID_ASPECT_RATIOS:
            raise ValueError(f"Invalid aspect ratio '{value}'. Allowed: 16:9, 9:16")
        return value

    @field_validator("concurrency_limit", "retry_max_attempts")
    @classmethod
    def validate_positive_ints(cls, value: int) -> int:
        if value < 1:
            raise ValueError("Configuration values must be >= 1")
        return value

    @field_validator("poll_interval_seconds", "download_timeout_seconds", "retry_base_delay", "retry_max_delay")
    @classmethod
    def validate_positive_delays(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("Delay and timeout values must be > 0")
        return value

    @field_validator("max_poll_seconds")
    @classmethod
    def validate_max_poll(cls, value: float) -> float:
        if value < 0:
            raise ValueError("max_poll_seconds must be >= 0 (0 disables the cap)")
        return value

    @property
    def resolved_media_dir(self) -> Path:
        """Return the media directory, defaulting to the user cache dir."""
        if self.media_dir:
            return Path(self.media_dir)
        return Path.home() / ".cache" / "dream-sequence-mcp" / "media"

    @classmethod
    def from_env(cls) -> ServerConfig:
        """Build config from environment variables."""
        return cls(
            gemini_api_key=_env_str("GEMINI_API_KEY", ""),
            veo_model=_env_str("VEO_MODEL", DEFAULT_VEO_MODEL),
            resolution=_env_str("VEO_RESOLUTION", "1080p"),
            aspect_ratio=_env_str("VEO_ASPECT_RATIO", "16:9"),
            concurrency_limit=int(_env_str("DREAM_CONCURRENCY", "2")),
            poll_interval_seconds=float(_env_str("VEO_POLL_INTERVAL", "10.0")),
            max_poll_seconds=float(_env_str("VEO_MAX_POLL_SECONDS", "0")),
            download_timeout_seconds=float(_env_str("DREAM_DOWNLOAD_TIMEOUT", "120")),
            media_dir=_env_str("DREAM_MEDIA_DIR", ""),
            prompt_template=os.getenv("DREAM_PROMPT_TEMPLATE") or DEFAULT_PROMPT_TEMPLATE,
            retry_max_attempts=int(_env_str("GEMINI_RETRY_MAX_ATTEMPTS", "3")),
            retry_base_delay=float(_env_str("GEMINI_RETRY_BASE_DELAY", "1.0")),
            retry_max_delay=float(_env_str("GEMINI_RETRY_MAX_DELAY", "60.0")),
            tracing_enabled=_resolve_tracing_enabled(
                os.getenv("GEMINI_TRACING_ENABLED", ""),
                os.getenv("MLFLOW_TRACKING_URI", ""),
            ),
            mlflow_tracking_uri=os.getenv("MLFLOW_TRACKING_URI", ""),
            mlflow_experiment_name=os.getenv("MLFLOW_EXPERIMENT_NAME", "dream-sequence-mcp"),
        )


# Singleton — initialised on first access.
_config: ServerConfig | None = None


def get_config() -> ServerConfig:
    """Return the global config singleton, creating it on first access.

    Loads ``~/.config/dream-sequence-mcp/.env`` before reading env vars.
    Process environment always takes precedence over the config file.
    """
    global _config
    if _config is None:
        import logging

        from .dotenv import load_dotenv

        injected = load_dotenv()
        if injected:
            logger = logging.getLogger(__name__)
            logger.info(
                "Loaded %d var(s) from config: %s",
                len(injected),
                ", ".join(injected.keys()),
            )
        _config = ServerConfig.from_env()
    return _config


def update_config(**overrides: object) -> ServerConfig:
    """Patch the live config (used by ``infra_configure`` tool)."""
    global _config
    cfg = get_config()
    data = cfg.model_dump()
    data.update({k: v for k, v in overrides.items() if v is not None})
    _config = ServerConfig(**data)
    return _config


def refresh_api_key() -> ServerConfig:
    """Re-read ``GEMINI_API_KEY`` into the live config; other fields keep their runtime values."""
    global _config
    cfg = get_config()
    _config = cfg.model_copy(update={"gemini_api_key": _env_str("GEMINI_API_KEY", "")})
    return _config

"""Configuration and constants."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

# Load environment variables once
load_dotenv()


def _env_float(name: str, default: float) -> float:
    value = os.environ.get(name)
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name)
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _arg_or(args, name: str, default):
    # 0 是合法的命令行取值，交给 validate() 判断
    value = getattr(args, name, None)
    return default if value is None else value


@dataclass
class TranslatorConfig:
    """Configuration for subtitle translation."""

    # Engine settings
    engine: str = "google"
    source_lang: str = "en"
    target_lang: str = "zh-CN"

    # Batch settings
    batch_size: int = 5
    batch_delay: float = 0.5
    request_timeout: float = 15.0

    # Cache settings
    cache_ttl: float = 24 * 60 * 60

    # Google
    google_base_url: str = "https://translate.googleapis.com"

    # Tencent Cloud MT
    tencent_secret_id: Optional[str] = None
    tencent_secret_key: Optional[str] = None
    tencent_region: str = "ap-guangzhou"

    # OpenAI-compatible
    openai_api_key: Optional[str] = None
    openai_base_url: Optional[str] = None
    openai_model: str = "gpt-4o-mini"

    # Web settings
    max_upload_mb: int = 5

    def __post_init__(self):
        """Fill credentials from environment if not provided."""
        if self.tencent_secret_id is None:
            self.tencent_secret_id = os.environ.get("TENCENT_SECRET_ID") or None
        if self.tencent_secret_key is None:
            self.tencent_secret_key = os.environ.get("TENCENT_SECRET_KEY") or None
        if self.openai_api_key is None:
            self.openai_api_key = os.environ.get("OPENAI_API_KEY") or None
        if self.openai_base_url is None:
            self.openai_base_url = os.environ.get("OPENAI_BASE_URL") or None

    @classmethod
    def from_env(cls) -> "TranslatorConfig":
        """Create config from environment variables (.env included)."""
        return cls(
            engine=os.environ.get("SRT_ENGINE", "google"),
            source_lang=os.environ.get("SRT_SOURCE_LANG", "en"),
            target_lang=os.environ.get("SRT_TARGET_LANG", "zh-CN"),
            batch_size=_env_int("SRT_BATCH_SIZE", 5),
            batch_delay=_env_float("SRT_BATCH_DELAY", 0.5),
            request_timeout=_env_float("SRT_REQUEST_TIMEOUT", 15.0),
            cache_ttl=_env_float("SRT_CACHE_TTL", 24 * 60 * 60),
            google_base_url=os.environ.get(
                "SRT_GOOGLE_BASE_URL", "https://translate.googleapis.com"
            ),
            tencent_region=os.environ.get("TENCENT_REGION", "ap-guangzhou"),
            openai_model=os.environ.get("OPENAI_MODEL", "gpt-4o-mini"),
            max_upload_mb=_env_int("SRT_MAX_UPLOAD_MB", 5),
        )

    @classmethod
    def from_args(cls, args) -> "TranslatorConfig":
        """Create config from argparse namespace, falling back to env."""
        base = cls.from_env()
        return cls(
            engine=getattr(args, 'engine', None) or base.engine,
            source_lang=getattr(args, 'source_lang', None) or base.source_lang,
            target_lang=getattr(args, 'target_lang', None) or base.target_lang,
            batch_size=_arg_or(args, 'batch_size', base.batch_size),
            batch_delay=_arg_or(args, 'delay', base.batch_delay),
            request_timeout=_arg_or(args, 'timeout', base.request_timeout),
            cache_ttl=base.cache_ttl,
            google_base_url=base.google_base_url,
            tencent_region=base.tencent_region,
            openai_model=getattr(args, 'openai_model', None) or base.openai_model,
            max_upload_mb=base.max_upload_mb,
        )

    def validate(self) -> Optional[str]:
        """
        Validate configuration.

        Returns:
            Error message if invalid, None if valid
        """
        if self.batch_size < 1 or self.batch_size > 50:
            return f"Batch size must be 1-50, got {self.batch_size}"

        if self.batch_delay < 0:
            return f"Batch delay must be >= 0, got {self.batch_delay}"

        if self.request_timeout <= 0:
            return f"Request timeout must be > 0, got {self.request_timeout}"

        return None


# Supported file extensions
SUPPORTED_EXTENSIONS = {".srt"}

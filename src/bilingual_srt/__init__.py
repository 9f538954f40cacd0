"""
bilingual-srt - Translate SRT subtitles into bilingual or translated-only files.

Features:
- Tolerant SRT parsing and lossless regeneration
- Google, Tencent Cloud MT, macOS and OpenAI-compatible engines
- In-memory translation cache with expiry
- Sequential, throttled batch translation with partial-failure bookkeeping
- HTTP API and command-line interface
"""

__version__ = "0.3.0"

from .models import (
    SubtitleEntry,
    SrtDocument,
    Translation,
    TranslationState,
    TranslationStatus,
    OutputMode,
    FAILED_SENTINEL,
    RETRY_SENTINEL,
)
from .parser import parse_srt, generate_srt, check_status, save_srt, validate_srt_file
from .cache import TranslationCache
from .errors import (
    SrtTranslateError,
    ValidationError,
    RemoteError,
    ConfigurationError,
    DocumentBusyError,
)
from .config import TranslatorConfig
from .translators import Translator, create_translator, available_engines, parse_google_payload
from .client import TranslationClient
from .orchestrator import BatchOrchestrator, BatchProgress, RunSummary

__all__ = [
    # Models
    "SubtitleEntry",
    "SrtDocument",
    "Translation",
    "TranslationState",
    "TranslationStatus",
    "OutputMode",
    "FAILED_SENTINEL",
    "RETRY_SENTINEL",
    # Parsing
    "parse_srt",
    "generate_srt",
    "check_status",
    "save_srt",
    "validate_srt_file",
    # Cache
    "TranslationCache",
    # Errors
    "SrtTranslateError",
    "ValidationError",
    "RemoteError",
    "ConfigurationError",
    "DocumentBusyError",
    # Config
    "TranslatorConfig",
    # Translation
    "Translator",
    "create_translator",
    "available_engines",
    "parse_google_payload",
    "TranslationClient",
    "BatchOrchestrator",
    "BatchProgress",
    "RunSummary",
]

"""Cached single and batch translation over the engine adapters."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Dict, List, Optional, Sequence

from .cache import TranslationCache, cache_key
from .config import TranslatorConfig
from .errors import RemoteError, SrtTranslateError, ValidationError
from .models import Translation
from .text_utils import truncate_text
from .translators import Translator, create_translator

logger = logging.getLogger(__name__)

TranslatorFactory = Callable[[str, TranslatorConfig], Translator]


def normalize_engine(engine: str) -> str:
    """引擎名不区分大小写，首尾空白忽略。"""
    return engine.strip().lower()


def _as_remote_error(error: BaseException) -> SrtTranslateError:
    if isinstance(error, SrtTranslateError):
        return error
    return RemoteError("Translation failed", detail=str(error) or type(error).__name__)


class TranslationClient:
    """
    Translate texts through an engine with cache read-through.

    Translators are created on first use of an engine and kept until
    ``aclose``.
    """

    def __init__(
        self,
        cache: TranslationCache,
        config: Optional[TranslatorConfig] = None,
        factory: TranslatorFactory = create_translator,
    ):
        self.cache = cache
        self.config = config or TranslatorConfig()
        self._factory = factory
        self._translators: Dict[str, Translator] = {}

    def translator(self, engine: str) -> Translator:
        """Resolve the adapter for an engine (ConfigurationError if unusable)."""
        key = normalize_engine(engine)
        if key not in self._translators:
            self._translators[key] = self._factory(key, self.config)
        return self._translators[key]

    def cached(self, text: str, engine: str) -> Optional[str]:
        return self.cache.get(cache_key(normalize_engine(engine), text))

    def _store(self, text: str, engine: str, translation: str) -> None:
        key = cache_key(normalize_engine(engine), text)
        self.cache.set(key, translation, self.config.cache_ttl)

    async def translate_one(self, text: str, engine: str = "google") -> str:
        """
        Translate a single text.

        Raises:
            ValidationError: empty text
            ConfigurationError: engine unknown or not configured
            RemoteError: the vendor call failed
        """
        if not text or not text.strip():
            raise ValidationError("Text is required")
        engine = normalize_engine(engine)

        hit = self.cached(text, engine)
        if hit is not None:
            logger.debug(f"Cache hit for: {truncate_text(text)}")
            return hit

        translator = self.translator(engine)
        try:
            translation = await asyncio.wait_for(
                translator.translate_one(text), self.config.request_timeout
            )
        except asyncio.TimeoutError as e:
            raise RemoteError(
                f"{engine} translation timed out",
                detail=f"no response after {self.config.request_timeout}s",
            ) from e
        except SrtTranslateError:
            raise
        except Exception as e:
            raise _as_remote_error(e) from e

        self._store(text, engine, translation)
        return translation

    async def translate_batch(
        self, texts: Sequence[str], engine: str = "google"
    ) -> List[Translation]:
        """
        Translate texts element-wise.

        The result has the same length and order as ``texts``. A failed
        element becomes ``Translation.failed``; siblings are unaffected.

        Raises:
            ValidationError: empty or missing texts
            ConfigurationError: engine unknown or not configured
        """
        if not texts:
            raise ValidationError("Texts array is required")
        engine = normalize_engine(engine)

        results: List[Optional[Translation]] = [None] * len(texts)
        misses: List[int] = []

        for i, text in enumerate(texts):
            hit = self.cached(text, engine)
            if hit is not None:
                results[i] = Translation.done(hit)
            else:
                misses.append(i)

        if misses:
            translator = self.translator(engine)
            outcomes = await translator.translate_batch([texts[i] for i in misses])

            for i, outcome in zip(misses, outcomes):
                if isinstance(outcome, BaseException):
                    if not isinstance(outcome, Exception):
                        raise outcome
                    error = _as_remote_error(outcome)
                    logger.warning(
                        f"{engine} translation failed for \"{truncate_text(texts[i])}\": {error}"
                    )
                    results[i] = Translation.failed(error.message)
                elif not outcome:
                    results[i] = Translation.failed("empty translation")
                else:
                    self._store(texts[i], engine, outcome)
                    results[i] = Translation.done(outcome)

        return [r if r is not None else Translation.failed() for r in results]

    async def aclose(self) -> None:
        for translator in self._translators.values():
            await translator.aclose()
        self._translators.clear()

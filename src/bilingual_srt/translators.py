"""Translation engine adapters."""

from __future__ import annotations

import asyncio
import logging
import shutil
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence, Union

import httpx
from openai import AsyncOpenAI

from .config import TranslatorConfig
from .errors import ConfigurationError, RemoteError
from .llm_client import call_llm_async, create_client
from .text_utils import clean_translated_text, truncate_text

logger = logging.getLogger(__name__)

BROWSER_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/94.0.4606.81 Safari/537.36"
    ),
    "Referer": "https://translate.google.com/",
}

BatchResult = List[Union[str, BaseException]]


class Translator(ABC):
    """
    翻译引擎抽象接口。

    Each vendor adapter implements ``translate_one``. ``translate_batch``
    fans out per text by default and converges before returning; element
    failures come back as exception objects in place of the text.
    """

    name: str = ""

    def __init__(self, timeout: float = 15.0):
        self.timeout = timeout

    @abstractmethod
    async def translate_one(self, text: str) -> str:
        """Translate one text; raise RemoteError on failure."""

    async def translate_with_timeout(self, text: str) -> str:
        try:
            return await asyncio.wait_for(self.translate_one(text), self.timeout)
        except asyncio.TimeoutError as e:
            raise RemoteError(
                f"{self.name} translation timed out",
                detail=f"no response after {self.timeout}s",
            ) from e

    async def translate_batch(self, texts: Sequence[str]) -> BatchResult:
        return await asyncio.gather(
            *(self.translate_with_timeout(t) for t in texts),
            return_exceptions=True,
        )

    async def aclose(self) -> None:
        """Release network resources."""


def parse_google_payload(payload: Any) -> str:
    """
    Extract the translation from a ``translate_a/single`` response.

    The payload's first element is a list of ``[fragment, ...]`` tuples;
    tuples with an empty fragment are dropped and the rest concatenated.
    """
    if not isinstance(payload, list) or not payload or not isinstance(payload[0], list):
        raise RemoteError("Failed to parse Google translation result",
                          detail=f"unexpected payload: {truncate_text(repr(payload), 80)}")

    parts = [
        str(item[0])
        for item in payload[0]
        if isinstance(item, list) and item and item[0]
    ]
    translation = "".join(parts)
    if not translation:
        raise RemoteError("Failed to parse Google translation result",
                          detail="empty translation")
    return translation


class GoogleTranslator(Translator):
    """Google 翻译网页接口（translate_a/single）。"""

    name = "google"

    def __init__(
        self,
        base_url: str = "https://translate.googleapis.com",
        source_lang: str = "en",
        target_lang: str = "zh-CN",
        timeout: float = 15.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(timeout)
        self.base_url = base_url.rstrip("/")
        self.source_lang = source_lang or "auto"
        self.target_lang = target_lang
        self._http = http_client or httpx.AsyncClient(timeout=timeout)

    def _endpoint(self) -> str:
        return f"{self.base_url}/translate_a/single"

    async def translate_one(self, text: str) -> str:
        logger.info(f"Google translating: \"{truncate_text(text)}\"")
        params = {
            "client": "gtx",
            "sl": self.source_lang,
            "tl": self.target_lang,
            "dt": "t",
            "q": text,
        }
        try:
            resp = await self._http.get(self._endpoint(), params=params, headers=BROWSER_HEADERS)
            resp.raise_for_status()
            payload = resp.json()
        except httpx.HTTPStatusError as e:
            raise RemoteError(
                "Google translation failed",
                detail=f"HTTP {e.response.status_code}",
            ) from e
        except httpx.HTTPError as e:
            raise RemoteError("Google translation failed", detail=str(e) or type(e).__name__) from e
        except ValueError as e:
            raise RemoteError("Failed to parse Google translation result", detail=str(e)) from e

        return parse_google_payload(payload)

    async def aclose(self) -> None:
        await self._http.aclose()


class MacTranslator(Translator):
    """macOS ``translation`` 命令行工具。"""

    name = "mac"

    def __init__(
        self,
        target_lang: str = "zh-Hans",
        timeout: float = 15.0,
        command: str = "translation",
    ):
        super().__init__(timeout)
        path = shutil.which(command)
        if not path:
            raise ConfigurationError(
                "The macOS translation tool is not available, choose another engine",
                detail=f"command not found: {command}",
            )
        self.command_path = path
        self.target_lang = target_lang

    async def translate_one(self, text: str) -> str:
        logger.info(f"Mac translating: \"{truncate_text(text)}\"")
        proc = await asyncio.create_subprocess_exec(
            self.command_path, "shell", "--to", self.target_lang,
            stdin=asyncio.subprocess.PIPE,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        try:
            stdout, stderr = await asyncio.wait_for(
                proc.communicate(text.encode("utf-8")), self.timeout
            )
        except asyncio.TimeoutError as e:
            proc.kill()
            await proc.wait()
            raise RemoteError("Mac translation timed out", detail=f"after {self.timeout}s") from e

        if proc.returncode != 0:
            raise RemoteError(
                "Mac translation failed",
                detail=stderr.decode("utf-8", errors="replace").strip() or f"exit {proc.returncode}",
            )

        translation = stdout.decode("utf-8", errors="replace").strip()
        if not translation:
            raise RemoteError("Mac translation failed", detail="empty output")
        return translation


class OpenAITranslator(Translator):
    """OpenAI 兼容的聊天模型翻译。"""

    name = "openai"

    def __init__(
        self,
        api_key: Optional[str],
        model: str = "gpt-4o-mini",
        base_url: Optional[str] = None,
        target_lang: str = "Simplified Chinese",
        timeout: float = 15.0,
        client: Optional[AsyncOpenAI] = None,
    ):
        super().__init__(timeout)
        if client is None:
            if not api_key:
                raise ConfigurationError(
                    "OpenAI API key is not configured",
                    detail="set OPENAI_API_KEY in the environment or .env",
                )
            client = create_client(api_key, base_url, timeout)
        self._client = client
        self.model = model
        self.target_lang = target_lang

    def _messages(self, text: str) -> List[Dict[str, str]]:
        system_prompt = (
            f"Translate the subtitle text into {self.target_lang}. "
            "Keep the line breaks. Output only the translation, no explanation."
        )
        return [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": text},
        ]

    async def translate_one(self, text: str) -> str:
        logger.info(f"Model translating ({self.model}): \"{truncate_text(text)}\"")
        content = await call_llm_async(self._client, self.model, self._messages(text))
        translation = clean_translated_text(content)
        if not translation:
            raise RemoteError("Model returned an empty translation")
        return translation

    async def aclose(self) -> None:
        await self._client.close()


# 可选引擎，azure / custom 目前仅占位
ENGINE_INFO = {
    "google": ("Google Translate", "Free web endpoint (default)"),
    "tencent": ("Tencent Cloud MT", "Requires TENCENT_SECRET_ID and TENCENT_SECRET_KEY"),
    "mac": ("macOS translation", "Uses the local `translation` command"),
    "openai": ("OpenAI", "Chat model translation, requires OPENAI_API_KEY"),
}
PLANNED_ENGINES = {"azure", "custom"}

MAC_LANGS = {"zh-CN": "zh-Hans", "zh-TW": "zh-Hant"}
LLM_LANGS = {"zh-CN": "Simplified Chinese", "zh-TW": "Traditional Chinese"}


def create_translator(name: str, config: TranslatorConfig) -> Translator:
    """
    根据名称返回对应的翻译引擎实例。

    Raises:
        ConfigurationError: unknown or unimplemented engine, or missing
            credentials for the selected one
    """
    key = name.strip().lower()
    if key == "google":
        return GoogleTranslator(
            base_url=config.google_base_url,
            source_lang=config.source_lang,
            target_lang=config.target_lang,
            timeout=config.request_timeout,
        )
    if key == "tencent":
        from .tencent import TencentTranslator
        return TencentTranslator(
            secret_id=config.tencent_secret_id,
            secret_key=config.tencent_secret_key,
            region=config.tencent_region,
            source_lang=config.source_lang.split("-")[0],
            target_lang=config.target_lang.split("-")[0],
            timeout=config.request_timeout,
        )
    if key == "mac":
        return MacTranslator(
            target_lang=MAC_LANGS.get(config.target_lang, config.target_lang),
            timeout=config.request_timeout,
        )
    if key == "openai":
        return OpenAITranslator(
            api_key=config.openai_api_key,
            model=config.openai_model,
            base_url=config.openai_base_url,
            target_lang=LLM_LANGS.get(config.target_lang, config.target_lang),
            timeout=config.request_timeout,
        )
    if key in PLANNED_ENGINES:
        raise ConfigurationError(f"Translation engine '{name}' is not implemented yet")
    raise ConfigurationError(f"Unknown translation engine: {name}")


def available_engines() -> List[Dict[str, str]]:
    """List engines that can be selected."""
    return [
        {"id": engine_id, "name": title, "description": description}
        for engine_id, (title, description) in ENGINE_INFO.items()
    ]

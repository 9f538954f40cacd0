"""Tencent Cloud Machine Translation adapter (TC3-HMAC-SHA256 signed)."""

from __future__ import annotations

import hashlib
import hmac
import json
import logging
import time
from datetime import datetime, timezone
from typing import Callable, Dict, Optional

import httpx

from .errors import ConfigurationError, RemoteError
from .text_utils import truncate_text
from .translators import Translator

logger = logging.getLogger(__name__)

HOST = "tmt.tencentcloudapi.com"
SERVICE = "tmt"
ACTION = "TextTranslate"
VERSION = "2018-03-21"
ALGORITHM = "TC3-HMAC-SHA256"
CONTENT_TYPE = "application/json; charset=utf-8"
SIGNED_HEADERS = "content-type;host;x-tc-action"


def _sha256_hex(data: str) -> str:
    return hashlib.sha256(data.encode("utf-8")).hexdigest()


def _hmac_sha256(key: bytes, msg: str) -> bytes:
    return hmac.new(key, msg.encode("utf-8"), hashlib.sha256).digest()


def sign_request(
    payload: str,
    secret_id: str,
    secret_key: str,
    timestamp: int,
    action: str = ACTION,
) -> str:
    """
    Build the Authorization header for a TC3-HMAC-SHA256 request.

    Args:
        payload: Exact JSON body that will be sent
        secret_id: Tencent Cloud SecretId
        secret_key: Tencent Cloud SecretKey
        timestamp: Unix timestamp also sent as X-TC-Timestamp

    Returns:
        Authorization header value
    """
    date = datetime.fromtimestamp(timestamp, tz=timezone.utc).strftime("%Y-%m-%d")

    canonical_headers = (
        f"content-type:{CONTENT_TYPE}\n"
        f"host:{HOST}\n"
        f"x-tc-action:{action.lower()}\n"
    )
    canonical_request = "\n".join([
        "POST",
        "/",
        "",
        canonical_headers,
        SIGNED_HEADERS,
        _sha256_hex(payload),
    ])

    credential_scope = f"{date}/{SERVICE}/tc3_request"
    string_to_sign = "\n".join([
        ALGORITHM,
        str(timestamp),
        credential_scope,
        _sha256_hex(canonical_request),
    ])

    secret_date = _hmac_sha256(("TC3" + secret_key).encode("utf-8"), date)
    secret_service = _hmac_sha256(secret_date, SERVICE)
    secret_signing = _hmac_sha256(secret_service, "tc3_request")
    signature = hmac.new(
        secret_signing, string_to_sign.encode("utf-8"), hashlib.sha256
    ).hexdigest()

    return (
        f"{ALGORITHM} Credential={secret_id}/{credential_scope}, "
        f"SignedHeaders={SIGNED_HEADERS}, Signature={signature}"
    )


class TencentTranslator(Translator):
    """腾讯云机器翻译 TextTranslate。"""

    name = "tencent"

    def __init__(
        self,
        secret_id: Optional[str],
        secret_key: Optional[str],
        region: str = "ap-guangzhou",
        source_lang: str = "en",
        target_lang: str = "zh",
        timeout: float = 15.0,
        http_client: Optional[httpx.AsyncClient] = None,
        clock: Callable[[], float] = time.time,
    ):
        super().__init__(timeout)
        if not secret_id or not secret_key:
            raise ConfigurationError(
                "Tencent translation credentials are not configured",
                detail="set TENCENT_SECRET_ID and TENCENT_SECRET_KEY in the environment or .env",
            )
        self.secret_id = secret_id
        self.secret_key = secret_key
        self.region = region
        self.source_lang = source_lang
        self.target_lang = target_lang
        self._clock = clock
        self._http = http_client or httpx.AsyncClient(timeout=timeout)

    def _headers(self, payload: str) -> Dict[str, str]:
        timestamp = int(self._clock())
        return {
            "Authorization": sign_request(payload, self.secret_id, self.secret_key, timestamp),
            "Content-Type": CONTENT_TYPE,
            "Host": HOST,
            "X-TC-Action": ACTION,
            "X-TC-Timestamp": str(timestamp),
            "X-TC-Version": VERSION,
            "X-TC-Region": self.region,
        }

    async def translate_one(self, text: str) -> str:
        logger.info(f"Tencent translating: \"{truncate_text(text)}\"")
        payload = json.dumps(
            {
                "SourceText": text,
                "Source": self.source_lang,
                "Target": self.target_lang,
                "ProjectId": 0,
            },
            ensure_ascii=False,
        )
        try:
            resp = await self._http.post(
                f"https://{HOST}",
                content=payload.encode("utf-8"),
                headers=self._headers(payload),
            )
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPStatusError as e:
            raise RemoteError(
                "Tencent translation failed",
                detail=f"HTTP {e.response.status_code}",
            ) from e
        except httpx.HTTPError as e:
            raise RemoteError("Tencent translation failed", detail=str(e) or type(e).__name__) from e
        except ValueError as e:
            raise RemoteError("Invalid response from Tencent translation API", detail=str(e)) from e

        response = data.get("Response") if isinstance(data, dict) else None
        if not isinstance(response, dict):
            raise RemoteError("Invalid response from Tencent translation API")

        error = response.get("Error")
        if error:
            raise RemoteError(
                f"Tencent translation failed: {error.get('Message', 'unknown error')}",
                detail=error.get("Code"),
            )

        translation = response.get("TargetText")
        if not translation:
            raise RemoteError("Invalid response from Tencent translation API",
                              detail="missing TargetText")
        return translation

    async def aclose(self) -> None:
        await self._http.aclose()

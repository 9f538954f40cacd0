"""Tests for the Tencent Cloud MT adapter."""

import asyncio
import json
import re

import httpx
import pytest

from bilingual_srt.errors import ConfigurationError, RemoteError
from bilingual_srt.tencent import TencentTranslator, sign_request

TIMESTAMP = 1704067200  # 2024-01-01 00:00:00 UTC


def tencent_with(handler, **kwargs):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return TencentTranslator(
        secret_id="AKIDtest",
        secret_key="secret",
        http_client=client,
        clock=lambda: TIMESTAMP,
        **kwargs,
    )


class TestSignRequest:

    def test_authorization_format(self):
        auth = sign_request('{"a": 1}', "AKIDtest", "secret", TIMESTAMP)
        match = re.fullmatch(
            r"TC3-HMAC-SHA256 Credential=AKIDtest/2024-01-01/tmt/tc3_request, "
            r"SignedHeaders=content-type;host;x-tc-action, Signature=([0-9a-f]{64})",
            auth,
        )
        assert match

    def test_signature_depends_on_inputs(self):
        base = sign_request("{}", "id", "key", TIMESTAMP)
        assert base == sign_request("{}", "id", "key", TIMESTAMP)
        assert base != sign_request("{}", "id", "other", TIMESTAMP)
        assert base != sign_request('{"x": 1}', "id", "key", TIMESTAMP)
        assert base != sign_request("{}", "id", "key", TIMESTAMP + 1)


class TestTencentTranslator:

    def test_missing_credentials(self):
        with pytest.raises(ConfigurationError):
            TencentTranslator(secret_id="", secret_key=None)

    def test_request_and_response(self):
        seen = {}

        def handler(request):
            seen["headers"] = request.headers
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"Response": {"TargetText": "你好", "RequestId": "r"}})

        translator = tencent_with(handler, region="ap-shanghai")
        assert asyncio.run(translator.translate_one("Hello")) == "你好"

        headers = seen["headers"]
        assert headers["x-tc-action"] == "TextTranslate"
        assert headers["x-tc-version"] == "2018-03-21"
        assert headers["x-tc-region"] == "ap-shanghai"
        assert headers["x-tc-timestamp"] == str(TIMESTAMP)
        assert headers["authorization"].startswith("TC3-HMAC-SHA256 Credential=AKIDtest/2024-01-01/")
        assert seen["body"] == {"SourceText": "Hello", "Source": "en", "Target": "zh", "ProjectId": 0}

    def test_api_error(self):
        body = {"Response": {"Error": {"Code": "AuthFailure", "Message": "bad signature"}}}
        translator = tencent_with(lambda request: httpx.Response(200, json=body))
        with pytest.raises(RemoteError) as exc:
            asyncio.run(translator.translate_one("Hello"))
        assert "bad signature" in exc.value.message
        assert exc.value.detail == "AuthFailure"

    def test_missing_target_text(self):
        translator = tencent_with(lambda request: httpx.Response(200, json={"Response": {}}))
        with pytest.raises(RemoteError):
            asyncio.run(translator.translate_one("Hello"))

    def test_http_error(self):
        translator = tencent_with(lambda request: httpx.Response(503))
        with pytest.raises(RemoteError):
            asyncio.run(translator.translate_one("Hello"))

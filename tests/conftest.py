"""Shared test doubles."""

import pytest

from bilingual_srt.config import TranslatorConfig
from bilingual_srt.errors import ConfigurationError, RemoteError
from bilingual_srt.translators import Translator


class FakeTranslator(Translator):
    """Upper-cases text; texts listed in ``fail_on`` raise RemoteError."""

    name = "fake"

    def __init__(self, fail_on=()):
        super().__init__(timeout=1.0)
        self.fail_on = set(fail_on)
        self.calls = []
        self.closed = False

    async def translate_one(self, text):
        self.calls.append(text)
        if text in self.fail_on:
            raise RemoteError("vendor exploded", detail=text)
        return text.upper()

    async def aclose(self):
        self.closed = True


@pytest.fixture
def fake_translator():
    return FakeTranslator()


@pytest.fixture
def factory_for():
    """Build a translator factory that serves the given translator for every engine."""

    def make(translator):
        def factory(name, config: TranslatorConfig):
            if name == "broken":
                raise ConfigurationError("engine not configured")
            return translator
        return factory

    return make

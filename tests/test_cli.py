"""Tests for the command-line interface."""

import pytest

from bilingual_srt import cli
from bilingual_srt.client import TranslationClient

from conftest import FakeTranslator

SRT = (
    "1\n00:00:01,000 --> 00:00:02,000\nhello\n\n"
    "2\n00:00:03,000 --> 00:00:04,000\nworld\n\n"
)


@pytest.fixture
def fake_client(monkeypatch, factory_for):
    translator = FakeTranslator()

    def make(cache, config):
        return TranslationClient(cache, config, factory=factory_for(translator))

    monkeypatch.setattr(cli, "TranslationClient", make)
    return translator


def run_cli(argv):
    with pytest.raises(SystemExit) as exc:
        cli.main(argv)
    return exc.value.code


class TestTranslateCommand:

    def test_bilingual_default_output(self, tmp_path, fake_client):
        src = tmp_path / "video.srt"
        src.write_text(SRT, encoding="utf-8")

        assert run_cli(["translate", str(src), "--delay", "0"]) == 0

        out = tmp_path / "translated_bilingual.srt"
        assert out.read_text(encoding="utf-8") == (
            "1\n00:00:01,000 --> 00:00:02,000\nhello\nHELLO\n\n"
            "2\n00:00:03,000 --> 00:00:04,000\nworld\nWORLD\n\n"
        )

    def test_translated_only_explicit_output(self, tmp_path, fake_client):
        src = tmp_path / "video.srt"
        src.write_text(SRT, encoding="utf-8")
        out = tmp_path / "zh.srt"

        code = run_cli([
            "translate", str(src), str(out),
            "--mode", "translated_only", "--batch-size", "1", "--delay", "0",
        ])

        assert code == 0
        assert out.read_text(encoding="utf-8").startswith("1\n00:00:01,000 --> 00:00:02,000\nHELLO\n")
        assert fake_client.calls == ["hello", "world"]

    def test_missing_file(self, tmp_path, fake_client):
        assert run_cli(["translate", str(tmp_path / "nope.srt")]) == 1

    @pytest.mark.parametrize("option", [
        ["--batch-size", "99"],
        ["--batch-size", "0"],
        ["--timeout", "0"],
    ])
    def test_invalid_options(self, tmp_path, fake_client, option):
        src = tmp_path / "video.srt"
        src.write_text(SRT, encoding="utf-8")
        assert run_cli(["translate", str(src), *option]) == 1
        assert fake_client.calls == []

    def test_unconfigured_engine(self, tmp_path, monkeypatch):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        src = tmp_path / "video.srt"
        src.write_text(SRT, encoding="utf-8")
        assert run_cli(["translate", str(src), "--engine", "azure"]) == 1
        assert not (tmp_path / "translated_bilingual.srt").exists()


def test_parser_requires_command():
    with pytest.raises(SystemExit):
        cli.build_parser().parse_args([])

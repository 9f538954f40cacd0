"""Tests for subtitle models."""

import pytest

from bilingual_srt.models import (
    FAILED_SENTINEL,
    RETRY_SENTINEL,
    OutputMode,
    SrtDocument,
    SubtitleEntry,
    Translation,
    TranslationState,
)


class TestTranslation:

    def test_default_is_pending(self):
        assert Translation().is_pending
        assert Translation().to_text() is None

    def test_failed_serializes_to_sentinel(self):
        t = Translation.failed("timeout")
        assert t.is_failed
        assert t.reason == "timeout"
        assert t.to_text() == FAILED_SENTINEL

    def test_from_text(self):
        assert Translation.from_text(None).is_pending
        assert Translation.from_text("").is_pending
        assert Translation.from_text(FAILED_SENTINEL).is_failed
        assert Translation.from_text(RETRY_SENTINEL).is_failed
        done = Translation.from_text("你好")
        assert done.state is TranslationState.DONE
        assert done.text == "你好"


class TestSubtitleEntry:

    def test_creation(self):
        entry = SubtitleEntry(1, "00:00:01,000 --> 00:00:03,500", "Hello world")
        assert entry.sequence_index == 1
        assert entry.source_text == "Hello world"
        assert entry.translated_text is None
        assert entry.needs_translation

    def test_ids_are_unique(self):
        a = SubtitleEntry(1, "t", "a")
        b = SubtitleEntry(1, "t", "a")
        assert a.id != b.id

    def test_translated_text_setter(self):
        entry = SubtitleEntry(1, "t", "Hello")
        entry.translated_text = "你好"
        assert entry.translation.is_done
        assert not entry.needs_translation

        entry.translated_text = FAILED_SENTINEL
        assert entry.translation.is_failed
        assert entry.needs_translation

    def test_to_srt(self):
        entry = SubtitleEntry(1, "00:00:01,000 --> 00:00:03,500", "Hello")
        expected = "1\n00:00:01,000 --> 00:00:03,500\nHello\n\n"
        assert entry.to_srt() == expected

    def test_copy_keeps_id(self):
        entry = SubtitleEntry(1, "00:00:01,000 --> 00:00:03,500", "Hello")
        copied = entry.copy(source_text="World")

        assert entry.source_text == "Hello"
        assert copied.source_text == "World"
        assert copied.time_range == entry.time_range
        assert copied.id == entry.id


class TestOutputMode:

    def test_parse(self):
        assert OutputMode.parse("bilingual") is OutputMode.BILINGUAL
        assert OutputMode.parse("translated_only") is OutputMode.TRANSLATED_ONLY
        assert OutputMode.parse("translated-only") is OutputMode.TRANSLATED_ONLY
        assert OutputMode.parse("chinese") is OutputMode.TRANSLATED_ONLY
        assert OutputMode.parse(OutputMode.BILINGUAL) is OutputMode.BILINGUAL

    def test_parse_unknown(self):
        with pytest.raises(ValueError):
            OutputMode.parse("klingon")

    def test_filenames(self):
        assert OutputMode.BILINGUAL.filename == "translated_bilingual.srt"
        assert OutputMode.TRANSLATED_ONLY.filename == "translated_chinese.srt"


class TestSrtDocument:

    CONTENT = (
        "1\n00:00:01,000 --> 00:00:02,000\nHello\n\n"
        "2\n00:00:03,000 --> 00:00:04,000\nWorld\n\n"
    )

    def test_from_text(self):
        doc = SrtDocument.from_text(self.CONTENT)
        assert len(doc) == 2
        assert not doc.busy

    def test_update_translation(self):
        doc = SrtDocument.from_text(self.CONTENT)
        first = doc.entries[0]
        doc.update_translation(first.id, "你好")
        assert doc.get(first.id).translated_text == "你好"
        assert doc.pending_entries() == [doc.entries[1]]

    def test_update_unknown_id(self):
        doc = SrtDocument.from_text(self.CONTENT)
        with pytest.raises(KeyError):
            doc.update_translation("missing", "x")

    def test_status_and_output(self):
        doc = SrtDocument.from_text(self.CONTENT)
        doc.entries[0].translated_text = "你好"
        status = doc.status()
        assert (status.translated, status.pending, status.total) == (1, 1, 2)
        assert doc.to_srt("translated_only").startswith("1\n00:00:01,000 --> 00:00:02,000\n你好\n")

"""Tests for text utilities."""

from bilingual_srt.text_utils import clean_translated_text, truncate_text


class TestCleanTranslatedText:

    def test_strip_code_fence(self):
        assert clean_translated_text("```\n你好\n```") == "你好"
        assert clean_translated_text("```text\n你好\n```") == "你好"

    def test_strip_wrapping_quotes(self):
        assert clean_translated_text('"你好"') == "你好"
        assert clean_translated_text("“你好”") == "你好"
        assert clean_translated_text("「你好」") == "你好"

    def test_keeps_inner_quotes(self):
        assert clean_translated_text('他说"你好"。') == '他说"你好"。'

    def test_keeps_line_breaks(self):
        assert clean_translated_text("  第一行 \n\n 第二行  ") == "第一行\n第二行"

    def test_empty_input(self):
        assert clean_translated_text("") == ""
        assert clean_translated_text(None) == ""


class TestTruncateText:

    def test_short_text_unchanged(self):
        assert truncate_text("hello", 30) == "hello"

    def test_truncated(self):
        result = truncate_text("a" * 40, 30)
        assert len(result) == 30
        assert result.endswith("...")

"""Text processing utilities."""

from __future__ import annotations

import re


QUOTE_PAIRS = {('"', '"'), ("'", "'"), ('“', '”'), ('「', '」')}


def clean_translated_text(text: str) -> str:
    """
    Clean a model-produced translation.

    只去掉包裹用的代码块和引号，保留字幕内的换行。

    Args:
        text: Raw translated text

    Returns:
        Cleaned text
    """
    if not text or not isinstance(text, str):
        return ""

    text = text.strip()

    # 1. 移除 markdown 代码块
    text = re.sub(r'^```[\w-]*\s*', '', text)
    text = re.sub(r'\s*```$', '', text)

    # 2. 移除整体包裹的引号
    if len(text) >= 2 and (text[0], text[-1]) in QUOTE_PAIRS:
        text = text[1:-1]

    # 3. 去掉每行首尾空白
    lines = [line.strip() for line in text.splitlines()]
    return "\n".join(line for line in lines if line)


def truncate_text(text: str, max_length: int = 30, suffix: str = "...") -> str:
    """
    Truncate text to maximum length with suffix, for log previews.

    Args:
        text: Text to truncate
        max_length: Maximum length including suffix
        suffix: Suffix to append if truncated

    Returns:
        Truncated text
    """
    if len(text) <= max_length:
        return text
    return text[:max_length - len(suffix)] + suffix

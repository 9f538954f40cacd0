"""SRT parsing, generation and saving utilities."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Sequence, Optional

from .config import SUPPORTED_EXTENSIONS
from .models import (
    OutputMode,
    RETRY_SENTINEL,
    SubtitleEntry,
    TranslationStatus,
)

logger = logging.getLogger(__name__)

# 上传文件大小上限
MAX_SRT_BYTES = 50 * 1024 * 1024


def _parse_index(line: str) -> Optional[int]:
    try:
        return int(line.strip())
    except ValueError:
        return None


def parse_srt(content: str) -> List[SubtitleEntry]:
    """
    Parse SRT file content into list of SubtitleEntry objects.

    Lines that are not an index between blocks are skipped. The line after
    the index is kept verbatim as the time range. An index line at the very
    end of the input is dropped.

    Args:
        content: Raw SRT file content as string

    Returns:
        List of parsed SubtitleEntry objects, all pending translation
    """
    if not content or not content.strip():
        return []

    # 标准化换行符，去掉 BOM
    content = content.replace('\r\n', '\n').replace('\r', '\n')
    content = content.lstrip('\ufeff').strip()

    lines = content.split('\n')
    entries: List[SubtitleEntry] = []
    i = 0

    while i < len(lines):
        index = _parse_index(lines[i])
        if index is None:
            i += 1
            continue

        # 时间码行原样保存
        i += 1
        if i >= len(lines):
            break
        time_range = lines[i]

        i += 1
        text_lines: List[str] = []
        while i < len(lines) and lines[i].strip() != '':
            text_lines.append(lines[i])
            i += 1

        entries.append(SubtitleEntry(index, time_range, '\n'.join(text_lines)))

        # 跳过空行
        i += 1

    if not entries:
        logger.warning("No valid SRT entries found in content")

    return entries


def effective_translation(entry: SubtitleEntry) -> str:
    """Translation text as displayed: failures become the retry prompt."""
    translation = entry.translation
    if translation.is_failed:
        return RETRY_SENTINEL
    if translation.is_done:
        return translation.text
    return ""


def _drop_blank_lines(text: str) -> str:
    # 空行是块分隔符，正文里不能出现
    return "\n".join(line for line in text.split("\n") if line.strip())


def render_body(entry: SubtitleEntry, mode: OutputMode) -> str:
    translation = _drop_blank_lines(effective_translation(entry))
    if mode is OutputMode.BILINGUAL:
        if translation:
            return f"{entry.source_text}\n{translation}"
        return entry.source_text
    # 没有译文时至少显示原文
    return translation or entry.source_text


def generate_srt(
    entries: Sequence[SubtitleEntry],
    mode: OutputMode | str = OutputMode.BILINGUAL,
) -> str:
    """
    Generate SRT text from entries.

    Every block is followed by one blank line, so the output parses back
    to the same entries.
    """
    mode = OutputMode.parse(mode)
    return "".join(e.to_srt(render_body(e, mode)) for e in entries)


def check_status(entries: Sequence[SubtitleEntry]) -> TranslationStatus:
    """Count translated, failed and pending entries."""
    status = TranslationStatus(total=len(entries))
    for e in entries:
        if e.translation.is_pending:
            status.pending += 1
        elif e.translation.is_failed:
            status.failed += 1
        else:
            status.translated += 1
    return status


def validate_srt_file(path: Path) -> Optional[str]:
    """
    Validate SRT file before processing.

    Args:
        path: Path to SRT file

    Returns:
        Error message if invalid, None if valid
    """
    if not path.exists():
        return f"File not found: {path}"

    if not path.is_file():
        return f"Not a file: {path}"

    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_EXTENSIONS:
        expected = ", ".join(sorted(SUPPORTED_EXTENSIONS))
        return f"Invalid file extension: {suffix} (expected {expected})"

    size = path.stat().st_size
    if size == 0:
        return "File is empty"
    if size > MAX_SRT_BYTES:
        return f"File too large: {size / 1024 / 1024:.1f}MB (max 50MB)"

    return None


def save_srt(
    entries: Sequence[SubtitleEntry],
    path: Path,
    mode: OutputMode | str = OutputMode.BILINGUAL,
) -> None:
    """
    Save entries to an SRT file.

    Args:
        entries: Sequence of SubtitleEntry objects to save
        path: Output file path
        mode: Bilingual or translated-only output
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    # 始终输出 LF 换行
    with path.open("w", encoding="utf-8", newline="\n") as f:
        f.write(generate_srt(entries, mode))

    logger.info(f"Saved {len(entries)} entries to {path}")

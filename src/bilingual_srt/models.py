"""Data models for subtitle entries and documents."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


# 原始失败标记与展示用的重试标记
FAILED_SENTINEL = "[translation failed]"
RETRY_SENTINEL = "[translation failed, retry]"
FAILURE_SENTINELS = frozenset({FAILED_SENTINEL, RETRY_SENTINEL})


class TranslationState(Enum):
    """翻译状态。"""
    PENDING = "pending"
    FAILED = "failed"
    DONE = "done"


@dataclass(frozen=True)
class Translation:
    """
    Tagged translation value: Pending | Failed(reason) | Done(text).

    Only serialized to the sentinel strings at the SRT/JSON boundary.
    """

    state: TranslationState = TranslationState.PENDING
    text: str = ""
    reason: str = ""

    @classmethod
    def pending(cls) -> "Translation":
        return cls()

    @classmethod
    def failed(cls, reason: str = "") -> "Translation":
        return cls(TranslationState.FAILED, reason=reason)

    @classmethod
    def done(cls, text: str) -> "Translation":
        return cls(TranslationState.DONE, text=text)

    @classmethod
    def from_text(cls, value: Optional[str]) -> "Translation":
        """Parse the legacy string view (None, sentinel or text)."""
        if not value:
            return cls.pending()
        if value in FAILURE_SENTINELS:
            return cls.failed()
        return cls.done(value)

    @property
    def is_pending(self) -> bool:
        return self.state is TranslationState.PENDING

    @property
    def is_failed(self) -> bool:
        return self.state is TranslationState.FAILED

    @property
    def is_done(self) -> bool:
        return self.state is TranslationState.DONE

    def to_text(self) -> Optional[str]:
        """Legacy string view: None, the failure sentinel, or the text."""
        if self.is_done:
            return self.text
        if self.is_failed:
            return FAILED_SENTINEL
        return None


class OutputMode(Enum):
    """SRT 输出模式。"""
    BILINGUAL = "bilingual"
    TRANSLATED_ONLY = "translated_only"

    @classmethod
    def parse(cls, value: "str | OutputMode") -> "OutputMode":
        if isinstance(value, OutputMode):
            return value
        key = value.strip().lower().replace("-", "_")
        # 兼容旧的 "chinese" 取值
        if key in ("chinese", "translated"):
            return cls.TRANSLATED_ONLY
        return cls(key)

    @property
    def filename(self) -> str:
        """Download filename for this mode."""
        if self is OutputMode.BILINGUAL:
            return "translated_bilingual.srt"
        return "translated_chinese.srt"


def _new_id() -> str:
    return uuid.uuid4().hex


@dataclass
class SubtitleEntry:
    """A single subtitle block in SRT format."""

    sequence_index: int
    time_range: str
    source_text: str
    translation: Translation = field(default_factory=Translation.pending)
    id: str = field(default_factory=_new_id)

    @property
    def translated_text(self) -> Optional[str]:
        return self.translation.to_text()

    @translated_text.setter
    def translated_text(self, value: Optional[str]) -> None:
        self.translation = Translation.from_text(value)

    @property
    def needs_translation(self) -> bool:
        """Pending or failed entries are picked up by a translation run."""
        return not self.translation.is_done

    def to_srt(self, body: str | None = None) -> str:
        """Convert entry to an SRT block, followed by one blank line."""
        text = self.source_text if body is None else body
        return f"{self.sequence_index}\n{self.time_range}\n{text}\n\n"

    def copy(self, **changes) -> "SubtitleEntry":
        """Create a copy with optional field changes (same id)."""
        return SubtitleEntry(
            sequence_index=changes.get('sequence_index', self.sequence_index),
            time_range=changes.get('time_range', self.time_range),
            source_text=changes.get('source_text', self.source_text),
            translation=changes.get('translation', self.translation),
            id=changes.get('id', self.id),
        )


@dataclass
class TranslationStatus:
    """Counts of entries per translation state."""

    total: int = 0
    translated: int = 0
    failed: int = 0
    pending: int = 0

    def as_dict(self) -> dict:
        return {
            "total": self.total,
            "translated": self.translated,
            "failed": self.failed,
            "pending": self.pending,
        }


@dataclass
class SrtDocument:
    """
    An ordered set of subtitle entries being translated.

    ``busy`` is set while a translation run is in flight.
    """

    entries: List[SubtitleEntry] = field(default_factory=list)
    busy: bool = False

    @classmethod
    def from_text(cls, content: str) -> "SrtDocument":
        from .parser import parse_srt
        return cls(parse_srt(content))

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries)

    def get(self, entry_id: str) -> Optional[SubtitleEntry]:
        for entry in self.entries:
            if entry.id == entry_id:
                return entry
        return None

    def update_translation(self, entry_id: str, text: Optional[str]) -> SubtitleEntry:
        """Manual edit of one entry's translation."""
        entry = self.get(entry_id)
        if entry is None:
            raise KeyError(entry_id)
        entry.translated_text = text
        return entry

    def pending_entries(self) -> List[SubtitleEntry]:
        return [e for e in self.entries if e.needs_translation]

    def status(self) -> TranslationStatus:
        from .parser import check_status
        return check_status(self.entries)

    def to_srt(self, mode: "OutputMode | str" = OutputMode.BILINGUAL) -> str:
        from .parser import generate_srt
        return generate_srt(self.entries, mode)

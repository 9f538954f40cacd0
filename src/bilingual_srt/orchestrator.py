"""Batch translation of a whole subtitle document."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Optional, Sequence

from .client import TranslationClient
from .errors import DocumentBusyError, SrtTranslateError
from .models import SrtDocument, SubtitleEntry, Translation

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 5
DEFAULT_BATCH_DELAY = 0.5


@dataclass
class BatchProgress:
    """Progress published after every batch."""

    current: int
    total: int
    succeeded: int
    failed: int
    entries: List[SubtitleEntry]
    batch_number: int = 0
    batch_count: int = 0

    @property
    def completion_rate(self) -> float:
        """完成率 (0-1)。"""
        if self.total == 0:
            return 1.0
        return self.current / self.total


@dataclass
class RunSummary:
    """Outcome of one translation run."""

    total: int = 0
    succeeded: int = 0
    failed: int = 0
    errors: List[str] = field(default_factory=list)
    cancelled: bool = False

    @property
    def has_failures(self) -> bool:
        return self.failed > 0


ProgressCallback = Callable[[BatchProgress], None]


def make_batches(entries: Sequence[SubtitleEntry], size: int) -> List[List[SubtitleEntry]]:
    """Split entries into consecutive batches of ``size``."""
    return [list(entries[i:i + size]) for i in range(0, len(entries), size)]


class BatchOrchestrator:
    """
    Translate a document's pending and failed entries batch by batch.

    Batches run strictly one after another with a fixed delay between
    them to stay under vendor rate limits. A failing batch marks its
    entries failed and the run moves on.
    """

    def __init__(
        self,
        client: TranslationClient,
        batch_size: int = DEFAULT_BATCH_SIZE,
        delay: float = DEFAULT_BATCH_DELAY,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {batch_size}")
        self.client = client
        self.batch_size = batch_size
        self.delay = delay
        self._sleep = sleep

    async def run(
        self,
        document: SrtDocument,
        engine: str = "google",
        on_progress: Optional[ProgressCallback] = None,
        cancel: Optional[asyncio.Event] = None,
    ) -> RunSummary:
        """
        Translate every entry that is pending or failed.

        Raises:
            DocumentBusyError: another run is in flight for the document
        """
        if document.busy:
            raise DocumentBusyError("A translation is already running for this document")

        document.busy = True
        try:
            return await self._run(document, engine, on_progress, cancel)
        finally:
            document.busy = False

    async def translate_entry(
        self,
        document: SrtDocument,
        entry_id: str,
        engine: str = "google",
    ) -> SubtitleEntry:
        """
        Translate one entry of the document and store the result.

        On failure the entry keeps its previous translation.

        Raises:
            KeyError: no entry with this id
            DocumentBusyError: a batch run is in flight for the document
            SrtTranslateError: the translation itself failed
        """
        entry = document.get(entry_id)
        if entry is None:
            raise KeyError(entry_id)
        if document.busy:
            raise DocumentBusyError("A translation is already running for this document")

        try:
            text = await self.client.translate_one(entry.source_text, engine)
        except SrtTranslateError as e:
            logger.error(f"Entry {entry.sequence_index} failed: {e}")
            raise

        entry.translation = Translation.done(text)
        return entry

    async def _run(
        self,
        document: SrtDocument,
        engine: str,
        on_progress: Optional[ProgressCallback],
        cancel: Optional[asyncio.Event],
    ) -> RunSummary:
        work = document.pending_entries()
        summary = RunSummary(total=len(work))

        if not work:
            logger.info("All entries are already translated")
            return summary

        batches = make_batches(work, self.batch_size)
        logger.info(
            f"Translating {len(work)} entries in {len(batches)} batches with {engine}..."
        )

        for i, batch in enumerate(batches):
            if cancel is not None and cancel.is_set():
                logger.info(f"Run cancelled before batch {i + 1}/{len(batches)}")
                summary.cancelled = True
                break

            texts = [e.source_text for e in batch]
            try:
                translations = await self.client.translate_batch(texts, engine)
            except Exception as e:
                # 整批失败：记录错误，继续下一批
                logger.error(f"Batch {i + 1} failed: {e}")
                summary.errors.append(f"batch {i + 1} failed: {e}")
                translations = [Translation.failed(str(e)) for _ in batch]

            for entry, translation in zip(batch, translations):
                entry.translation = translation
                if translation.is_done:
                    summary.succeeded += 1
                else:
                    summary.failed += 1

            current = min((i + 1) * self.batch_size, len(work))
            if on_progress is not None:
                on_progress(BatchProgress(
                    current=current,
                    total=len(work),
                    succeeded=summary.succeeded,
                    failed=summary.failed,
                    entries=list(document.entries),
                    batch_number=i + 1,
                    batch_count=len(batches),
                ))

            if i < len(batches) - 1 and self.delay > 0:
                await self._sleep(self.delay)

        if summary.failed:
            logger.warning(
                f"Translation finished with {summary.failed} failed entries; "
                "run again to retry them"
            )
        else:
            logger.info(f"Translation finished: {summary.succeeded}/{summary.total} translated")

        return summary

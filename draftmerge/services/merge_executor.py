"""Writes a reviewer-directed merge of two drafts into a new manuscript.

Rows (manuscript, folders, documents, search entries, audit entry) share a
single database transaction. Content files go into the new manuscript's
own directory while that transaction is open; if anything fails, the
transaction rolls back and the directory is removed, so a failed merge
leaves nothing behind. The source manuscripts are only read.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Optional, Sequence

from sqlmodel.ext.asyncio.session import AsyncSession

from draftmerge.core.errors import MergeFailedError
from draftmerge.core.logging import LogEvent
from draftmerge.db import get_session
from draftmerge.db.models import VARIANT_FOLDER_TYPE, Document, Folder, Manuscript
from draftmerge.services.audit import MERGE_ACTION, AuditLogger
from draftmerge.services.base_service import BaseService
from draftmerge.services.content_store import ContentStore
from draftmerge.services.merge_validation import RawInstruction, parse_merge_instructions
from draftmerge.services.search_indexer import SearchIndexer
from draftmerge.services.text_processor import count_words
from draftmerge.services.types import (
    ComparableDocument,
    MatchedPair,
    MergeChoice,
    MergeReport,
)

SORT_STEP = 1.0


@dataclass(slots=True)
class _MergeContext:
    session: AsyncSession
    manuscript_id: str
    source_a_title: str
    source_b_title: str
    report: MergeReport


class MergeExecutor(BaseService):
    """Creates the merged manuscript from matched pairs and instructions."""

    def __init__(
        self,
        content_store: Optional[ContentStore] = None,
        search_indexer: Optional[SearchIndexer] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        super().__init__()
        self.content_store = content_store or ContentStore()
        self.search_indexer = search_indexer or SearchIndexer()
        self.audit_logger = audit_logger or AuditLogger()

    async def execute(
        self,
        title: str,
        pairs: Sequence[MatchedPair],
        instructions: Sequence[RawInstruction],
        source_a_title: str,
        source_b_title: str,
        actor_id: str,
    ) -> MergeReport:
        # Raises before the first write
        parsed = parse_merge_instructions(instructions, len(pairs))

        manuscript = Manuscript(title=title, status="draft")
        report = MergeReport(manuscript_id=manuscript.id, title=title)

        self.logger.info(
            LogEvent.MERGE_STARTED,
            manuscript_id=manuscript.id,
            pair_count=len(pairs),
            actor_id=actor_id,
        )

        try:
            async with get_session() as session:
                session.add(manuscript)
                await session.flush()
                await asyncio.to_thread(self.content_store.ensure_manuscript_dirs, manuscript.id)

                ctx = _MergeContext(
                    session=session,
                    manuscript_id=manuscript.id,
                    source_a_title=source_a_title,
                    source_b_title=source_b_title,
                    report=report,
                )
                sort_order = 1.0
                for instruction in parsed:
                    pair = pairs[instruction.pair_index]
                    sort_order = await self._apply(ctx, pair, instruction.choice, sort_order)

                await self.audit_logger.log_action(
                    session,
                    user_id=actor_id,
                    action=MERGE_ACTION,
                    entity_type="manuscript",
                    entity_id=manuscript.id,
                    details={
                        "source_a": source_a_title,
                        "source_b": source_b_title,
                        "documents_created": report.documents_created,
                        "folders_created": report.folders_created,
                        "variant_folders": report.variant_folders,
                    },
                )
        except Exception as exc:
            await asyncio.to_thread(self._discard_content, manuscript.id)
            self.logger.error(
                LogEvent.MERGE_FAILED,
                manuscript_id=manuscript.id,
                error=str(exc),
                exc_info=True,
            )
            raise MergeFailedError(exc) from exc
        except BaseException:
            # Cancelled mid-merge: clean up without awaiting, re-raise as is
            self._discard_content(manuscript.id)
            self.logger.warning(LogEvent.MERGE_CANCELLED, manuscript_id=manuscript.id)
            raise

        self.logger.info(
            LogEvent.MERGE_COMPLETED,
            manuscript_id=report.manuscript_id,
            documents_created=report.documents_created,
            folders_created=report.folders_created,
            variant_folders=report.variant_folders,
            total_word_count=report.total_word_count,
        )
        return report

    async def _apply(
        self,
        ctx: _MergeContext,
        pair: MatchedPair,
        choice: MergeChoice,
        sort_order: float,
    ) -> float:
        """Apply one instruction; returns the next free root sort key."""
        if choice is MergeChoice.A:
            return await self._place_single(ctx, pair.doc_a, ctx.source_a_title, sort_order)
        elif choice is MergeChoice.B:
            return await self._place_single(ctx, pair.doc_b, ctx.source_b_title, sort_order)
        elif choice is MergeChoice.BOTH:
            return await self._place_variants(ctx, pair, sort_order)
        elif choice is MergeChoice.SKIP:
            return sort_order
        raise ValueError(f"Unhandled merge choice: {choice!r}")

    async def _place_single(
        self,
        ctx: _MergeContext,
        doc: Optional[ComparableDocument],
        source_title: str,
        sort_order: float,
    ) -> float:
        if doc is None:
            self.logger.warning(LogEvent.MERGE_SIDE_MISSING, manuscript_id=ctx.manuscript_id)
            return sort_order

        await self._create_document(
            ctx,
            doc,
            title=doc.title,
            source_title=source_title,
            parent_id=None,
            sort_order=sort_order,
            compile_include=True,
        )
        return sort_order + SORT_STEP

    async def _place_variants(self, ctx: _MergeContext, pair: MatchedPair, sort_order: float) -> float:
        folder_title = (pair.doc_a and pair.doc_a.title) or (pair.doc_b and pair.doc_b.title) or "Variant"
        folder = Folder(
            manuscript_id=ctx.manuscript_id,
            parent_id=None,
            title=folder_title,
            folder_type=VARIANT_FOLDER_TYPE,
            sort_order=sort_order,
        )
        ctx.session.add(folder)
        ctx.report.folders_created += 1
        ctx.report.variant_folders += 1

        # Alternatives, not sequential content: kept out of compilation
        child_sort = 1.0
        for doc, source_title in ((pair.doc_a, ctx.source_a_title), (pair.doc_b, ctx.source_b_title)):
            if doc is None:
                continue
            await self._create_document(
                ctx,
                doc,
                title=f"{doc.title} — from {source_title}",
                source_title=source_title,
                parent_id=folder.id,
                sort_order=child_sort,
                compile_include=False,
            )
            child_sort += SORT_STEP

        return sort_order + SORT_STEP

    async def _create_document(
        self,
        ctx: _MergeContext,
        doc: ComparableDocument,
        *,
        title: str,
        source_title: str,
        parent_id: Optional[str],
        sort_order: float,
        compile_include: bool,
    ) -> Document:
        plaintext = doc.plaintext
        word_count = count_words(plaintext)
        row = Document(
            manuscript_id=ctx.manuscript_id,
            parent_id=parent_id,
            title=title,
            synopsis=f"From: {source_title}",
            word_count=word_count,
            compile_include=compile_include,
            sort_order=sort_order,
        )
        ctx.session.add(row)

        await asyncio.to_thread(self.content_store.write, ctx.manuscript_id, row.id, doc.html)
        await self.search_indexer.index(ctx.session, row.id, title, plaintext)

        ctx.report.documents_created += 1
        ctx.report.total_word_count += word_count
        return row

    def _discard_content(self, manuscript_id: str) -> None:
        try:
            self.content_store.remove_manuscript(manuscript_id)
        except OSError as cleanup_error:
            self.logger.error(
                LogEvent.MERGE_CLEANUP_FAILED,
                manuscript_id=manuscript_id,
                error=str(cleanup_error),
            )

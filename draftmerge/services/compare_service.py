"""Facade coordinating draft comparison, per-pair diffs and merges."""
from __future__ import annotations

import asyncio
from typing import List, Sequence, Tuple

from sqlmodel import col, select

from draftmerge.core.errors import (
    ContentNotFoundError,
    InvalidRequestError,
    MergeInstructionError,
    ResourceNotFoundError,
)
from draftmerge.core.logging import LogEvent
from draftmerge.db import get_session
from draftmerge.db.models import Document, Manuscript
from draftmerge.services.base_service import BaseService, singleton
from draftmerge.services.content_store import ContentStore
from draftmerge.services.diff_computer import compute_pair_diff
from draftmerge.services.document_collector import DocumentCollector
from draftmerge.services.document_matcher import match_documents
from draftmerge.services.merge_executor import MergeExecutor
from draftmerge.services.merge_validation import RawInstruction, parse_merge_instructions
from draftmerge.services.text_processor import count_words, strip_html
from draftmerge.services.types import (
    ComparableDocument,
    MatchedPair,
    MatchMethod,
    MergeReport,
    PairDiff,
)


@singleton
class CompareService(BaseService):
    """Entry point for the HTTP layer; every call works on current state."""

    def _initialize(self) -> None:
        self.content_store = ContentStore()
        self.collector = DocumentCollector()
        self.executor = MergeExecutor(content_store=self.content_store)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    async def fetch_manuscript(self, manuscript_id: str) -> Manuscript:
        async with get_session() as session:
            stmt = (
                select(Manuscript)
                .where(Manuscript.id == manuscript_id)
                .where(col(Manuscript.deleted_at).is_(None))
            )
            manuscript = (await session.exec(stmt)).first()
        if manuscript is None:
            raise ResourceNotFoundError("Manuscript", manuscript_id)
        return manuscript

    async def _fetch_live_document(self, manuscript_id: str, doc_id: str) -> Document:
        async with get_session() as session:
            stmt = (
                select(Document)
                .where(Document.id == doc_id)
                .where(Document.manuscript_id == manuscript_id)
                .where(col(Document.deleted_at).is_(None))
            )
            document = (await session.exec(stmt)).first()
        if document is None:
            raise ResourceNotFoundError("Document", doc_id)
        return document

    # ------------------------------------------------------------------
    # Comparison
    # ------------------------------------------------------------------

    async def match_manuscripts(
        self,
        manuscript_id_a: str,
        manuscript_id_b: str,
    ) -> Tuple[List[MatchedPair], Manuscript, Manuscript]:
        self._ensure_initialized()

        manuscript_a = await self.fetch_manuscript(manuscript_id_a)
        manuscript_b = await self.fetch_manuscript(manuscript_id_b)

        self.logger.info(
            LogEvent.COMPARISON_STARTED,
            manuscript_id_a=manuscript_id_a,
            manuscript_id_b=manuscript_id_b,
        )
        docs_a = await self.collector.collect(manuscript_id_a, self.content_store)
        docs_b = await self.collector.collect(manuscript_id_b, self.content_store)
        pairs = match_documents(docs_a, docs_b)

        self.logger.info(
            LogEvent.COMPARISON_COMPLETED,
            documents_a=len(docs_a),
            documents_b=len(docs_b),
            pairs=len(pairs),
            unmatched=sum(
                1 for pair in pairs
                if pair.method in (MatchMethod.UNMATCHED_A, MatchMethod.UNMATCHED_B)
            ),
        )
        return pairs, manuscript_a, manuscript_b

    async def diff_documents(
        self,
        manuscript_id_a: str,
        doc_id_a: str,
        manuscript_id_b: str,
        doc_id_b: str,
    ) -> PairDiff:
        """Diff two stored documents, verifying each is live in its manuscript."""
        self._ensure_initialized()

        await self._fetch_live_document(manuscript_id_a, doc_id_a)
        await self._fetch_live_document(manuscript_id_b, doc_id_b)

        doc_a = await self._load_comparable(manuscript_id_a, doc_id_a)
        doc_b = await self._load_comparable(manuscript_id_b, doc_id_b)

        pair = MatchedPair(doc_a=doc_a, doc_b=doc_b, method=MatchMethod.EXACT_TITLE)
        result = compute_pair_diff(pair, 0)
        self.logger.debug(LogEvent.DIFF_COMPUTED, doc_id_a=doc_id_a, doc_id_b=doc_id_b, changes=len(result.changes))
        return result

    async def _load_comparable(self, manuscript_id: str, doc_id: str) -> ComparableDocument:
        html = await asyncio.to_thread(self.content_store.read, manuscript_id, doc_id)
        if html is None:
            raise ContentNotFoundError(manuscript_id, doc_id)
        plaintext = strip_html(html)
        return ComparableDocument(
            id=doc_id,
            title="",
            manuscript_id=manuscript_id,
            word_count=count_words(plaintext),
            plaintext=plaintext,
            html=html,
        )

    # ------------------------------------------------------------------
    # Merge
    # ------------------------------------------------------------------

    async def merge(
        self,
        manuscript_id_a: str,
        manuscript_id_b: str,
        merged_title: str,
        instructions: Sequence[RawInstruction],
        actor_id: str,
    ) -> MergeReport:
        """Validate everything against the current drafts, then merge.

        Pairs are recomputed here rather than taken from the client, whose
        review snapshot may predate concurrent edits.
        """
        self._ensure_initialized()

        if not merged_title or not merged_title.strip():
            raise InvalidRequestError("merged_title is required", details={"field": "merged_title"})

        pairs, manuscript_a, manuscript_b = await self.match_manuscripts(manuscript_id_a, manuscript_id_b)

        try:
            parsed = parse_merge_instructions(instructions, len(pairs))
        except MergeInstructionError as exc:
            self.logger.warning(
                LogEvent.MERGE_VALIDATION_FAILED,
                manuscript_id_a=manuscript_id_a,
                manuscript_id_b=manuscript_id_b,
                error=str(exc),
            )
            raise

        return await self.executor.execute(
            merged_title,
            pairs,
            parsed,
            manuscript_a.title,
            manuscript_b.title,
            actor_id,
        )

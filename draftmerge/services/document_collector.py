"""Flattens a manuscript's folder/document tree into comparable documents."""
from __future__ import annotations

import asyncio
from collections import defaultdict
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from sqlmodel import col, select

from draftmerge.core.logging import LogEvent
from draftmerge.db import get_session
from draftmerge.db.models import Document, Folder
from draftmerge.services.base_service import BaseService
from draftmerge.services.text_processor import count_words, strip_html
from draftmerge.services.types import ComparableDocument

# (manuscript_id, doc_id) -> HTML body, or None when missing
ContentReader = Callable[[str, str], Optional[str]]


@dataclass(slots=True)
class _TreeNode:
    id: str
    sort_order: float
    is_folder: bool
    title: str = ""


class DocumentCollector(BaseService):
    """Walks a manuscript tree in display order, skipping soft-deleted nodes."""

    async def collect(
        self,
        manuscript_id: str,
        content_reader: ContentReader,
    ) -> List[ComparableDocument]:
        async with get_session() as session:
            folder_rows = (
                await session.exec(
                    select(Folder.id, Folder.parent_id, Folder.sort_order)
                    .where(Folder.manuscript_id == manuscript_id)
                    .where(col(Folder.deleted_at).is_(None))
                    .order_by(Folder.sort_order)
                )
            ).all()
            document_rows = (
                await session.exec(
                    select(Document.id, Document.parent_id, Document.title, Document.sort_order)
                    .where(Document.manuscript_id == manuscript_id)
                    .where(col(Document.deleted_at).is_(None))
                    .order_by(Document.sort_order)
                )
            ).all()

        children: Dict[Optional[str], List[_TreeNode]] = defaultdict(list)
        for folder_id, parent_id, sort_order in folder_rows:
            children[parent_id].append(_TreeNode(folder_id, sort_order, is_folder=True))
        for doc_id, parent_id, title, sort_order in document_rows:
            children[parent_id].append(_TreeNode(doc_id, sort_order, is_folder=False, title=title))
        # Stable sort: on equal keys folders stay ahead of documents
        for siblings in children.values():
            siblings.sort(key=lambda node: node.sort_order)

        result: List[ComparableDocument] = []
        stack: List[_TreeNode] = list(reversed(children.get(None, [])))
        while stack:
            node = stack.pop()
            if node.is_folder:
                stack.extend(reversed(children.get(node.id, [])))
                continue

            # Readers do blocking file I/O
            html = await asyncio.to_thread(content_reader, manuscript_id, node.id)
            if html is None:
                self.logger.warning(LogEvent.CONTENT_MISSING, manuscript_id=manuscript_id, doc_id=node.id)
                html = ""
            plaintext = strip_html(html)
            result.append(
                ComparableDocument(
                    id=node.id,
                    title=node.title,
                    manuscript_id=manuscript_id,
                    word_count=count_words(plaintext),
                    plaintext=plaintext,
                    html=html,
                )
            )

        return result

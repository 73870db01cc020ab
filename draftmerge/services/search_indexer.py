"""Plaintext search index writes, joined to the caller's transaction."""
from __future__ import annotations

from sqlmodel.ext.asyncio.session import AsyncSession

from draftmerge.db.models import SearchEntry


class SearchIndexer:
    """Adds search rows through an existing session; never commits."""

    async def index(self, session: AsyncSession, doc_id: str, title: str, plaintext: str) -> SearchEntry:
        entry = SearchEntry(doc_id=doc_id, title=title, content=plaintext)
        session.add(entry)
        return entry

"""Shared fixtures: an isolated database and content root per test."""
from __future__ import annotations

from typing import Optional

import pytest

from draftmerge.core.config import get_settings
from draftmerge.db import dispose_engine, get_session, init_db
from draftmerge.db.models import Document, Folder, Manuscript, utcnow
from draftmerge.services.content_store import ContentStore


@pytest.fixture
async def database(tmp_path, monkeypatch):
    monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    monkeypatch.setenv("DATA_ROOT", str(tmp_path / "data"))
    get_settings.cache_clear()
    await dispose_engine()
    await init_db()
    yield
    await dispose_engine()
    get_settings.cache_clear()


@pytest.fixture
def content_store(database) -> ContentStore:
    return ContentStore()


class Seeder:
    """Writes manuscript trees straight into the store for tests."""

    def __init__(self, store: ContentStore):
        self.store = store

    async def manuscript(self, manuscript_id: str, title: str, deleted: bool = False) -> str:
        async with get_session() as session:
            session.add(
                Manuscript(
                    id=manuscript_id,
                    title=title,
                    deleted_at=utcnow() if deleted else None,
                )
            )
        return manuscript_id

    async def folder(
        self,
        manuscript_id: str,
        folder_id: str,
        title: str,
        sort_order: float,
        parent_id: Optional[str] = None,
        deleted: bool = False,
    ) -> str:
        async with get_session() as session:
            session.add(
                Folder(
                    id=folder_id,
                    manuscript_id=manuscript_id,
                    parent_id=parent_id,
                    title=title,
                    sort_order=sort_order,
                    deleted_at=utcnow() if deleted else None,
                )
            )
        return folder_id

    async def document(
        self,
        manuscript_id: str,
        doc_id: str,
        title: str,
        sort_order: float,
        html: Optional[str] = None,
        parent_id: Optional[str] = None,
        deleted: bool = False,
    ) -> str:
        async with get_session() as session:
            session.add(
                Document(
                    id=doc_id,
                    manuscript_id=manuscript_id,
                    parent_id=parent_id,
                    title=title,
                    sort_order=sort_order,
                    deleted_at=utcnow() if deleted else None,
                )
            )
        if html is not None:
            self.store.write(manuscript_id, doc_id, html)
        return doc_id


@pytest.fixture
def seed(content_store) -> Seeder:
    return Seeder(content_store)


@pytest.fixture
async def two_drafts(seed):
    """Two flat drafts sharing two chapters, each with one chapter of its own."""
    await seed.manuscript("ms-a", "Harbor Lights Draft 2")
    await seed.manuscript("ms-b", "Harbor Lights Draft 3")

    await seed.document("ms-a", "doc-a1", "Chapter One", 1.0, "<p>The silver moon rose over the quiet village</p>")
    await seed.document("ms-a", "doc-a2", "Chapter Two", 2.0, "<p>She walked through the forest feeling lost and alone</p>")
    await seed.document("ms-a", "doc-a3", "Epilogue", 3.0, "<p>Years later she returned to the harbor</p>")

    await seed.document("ms-b", "doc-b1", "Chapter One", 1.0, "<p>The silver moon rose over the quiet village</p>")
    await seed.document("ms-b", "doc-b2", "Chapter Two", 2.0, "<p>She walked through the dark forest feeling completely lost</p>")
    await seed.document("ms-b", "doc-b4", "Prologue", 3.0, "<p>Before everything began there was silence</p>")
    return "ms-a", "ms-b"

"""Draft comparison APIs: pair matching, per-pair diffs and merging."""
from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from draftmerge.api.deps import get_actor_id, get_compare_service
from draftmerge.core.logging import get_logger
from draftmerge.db.models import Manuscript
from draftmerge.services.compare_service import CompareService
from draftmerge.services.types import ComparableDocument, MatchedPair, MatchMethod, MergeReport

logger = get_logger(__name__)
router = APIRouter(prefix="/api/v1/compare", tags=["Comparison"])


class ComparableDocumentModel(BaseModel):
    id: str
    title: str
    manuscript_id: str
    word_count: int
    plaintext: str
    html: str

    @classmethod
    def from_document(cls, doc: Optional[ComparableDocument]) -> Optional["ComparableDocumentModel"]:
        if doc is None:
            return None
        return cls(
            id=doc.id,
            title=doc.title,
            manuscript_id=doc.manuscript_id,
            word_count=doc.word_count,
            plaintext=doc.plaintext,
            html=doc.html,
        )


class MatchedPairModel(BaseModel):
    doc_a: Optional[ComparableDocumentModel]
    doc_b: Optional[ComparableDocumentModel]
    method: MatchMethod
    similarity: float
    title_similarity: float

    @classmethod
    def from_pair(cls, pair: MatchedPair) -> "MatchedPairModel":
        return cls(
            doc_a=ComparableDocumentModel.from_document(pair.doc_a),
            doc_b=ComparableDocumentModel.from_document(pair.doc_b),
            method=pair.method,
            similarity=pair.similarity,
            title_similarity=pair.title_similarity,
        )


class ManuscriptSummary(BaseModel):
    id: str
    title: str

    @classmethod
    def from_model(cls, manuscript: Manuscript) -> "ManuscriptSummary":
        return cls(id=manuscript.id, title=manuscript.title)


class MatchRequest(BaseModel):
    manuscript_id_a: str = Field(..., min_length=1)
    manuscript_id_b: str = Field(..., min_length=1)


class MatchResponse(BaseModel):
    pairs: List[MatchedPairModel]
    manuscript_a: ManuscriptSummary
    manuscript_b: ManuscriptSummary


@router.post("/match", response_model=MatchResponse, summary="Match documents of two drafts")
async def match_manuscripts(
    payload: MatchRequest,
    service: CompareService = Depends(get_compare_service),
) -> MatchResponse:
    pairs, manuscript_a, manuscript_b = await service.match_manuscripts(
        payload.manuscript_id_a, payload.manuscript_id_b
    )
    return MatchResponse(
        pairs=[MatchedPairModel.from_pair(pair) for pair in pairs],
        manuscript_a=ManuscriptSummary.from_model(manuscript_a),
        manuscript_b=ManuscriptSummary.from_model(manuscript_b),
    )


class DiffRequest(BaseModel):
    manuscript_id_a: str = Field(..., min_length=1)
    doc_id_a: str = Field(..., min_length=1)
    manuscript_id_b: str = Field(..., min_length=1)
    doc_id_b: str = Field(..., min_length=1)


class DiffChangeModel(BaseModel):
    value: str
    added: Optional[bool] = None
    removed: Optional[bool] = None


class DiffResponse(BaseModel):
    changes: List[DiffChangeModel]
    word_count_a: int
    word_count_b: int


@router.post(
    "/diff",
    response_model=DiffResponse,
    response_model_exclude_none=True,
    summary="Word diff of two documents",
)
async def diff_documents(
    payload: DiffRequest,
    service: CompareService = Depends(get_compare_service),
) -> DiffResponse:
    result = await service.diff_documents(
        payload.manuscript_id_a,
        payload.doc_id_a,
        payload.manuscript_id_b,
        payload.doc_id_b,
    )
    return DiffResponse(
        changes=[
            DiffChangeModel(value=change.value, added=change.added, removed=change.removed)
            for change in result.changes
        ],
        word_count_a=result.word_count_a,
        word_count_b=result.word_count_b,
    )


class MergeInstructionModel(BaseModel):
    # Choice stays a plain string so bad values are reported per instruction
    pair_index: int
    choice: str


class MergeRequest(BaseModel):
    manuscript_id_a: str = Field(..., min_length=1)
    manuscript_id_b: str = Field(..., min_length=1)
    merged_title: str = Field(..., min_length=1, max_length=500)
    instructions: List[MergeInstructionModel]


class MergeResponse(BaseModel):
    manuscript_id: str
    title: str
    documents_created: int
    folders_created: int
    variant_folders: int
    total_word_count: int

    @classmethod
    def from_report(cls, report: MergeReport) -> "MergeResponse":
        return cls(
            manuscript_id=report.manuscript_id,
            title=report.title,
            documents_created=report.documents_created,
            folders_created=report.folders_created,
            variant_folders=report.variant_folders,
            total_word_count=report.total_word_count,
        )


@router.post("/merge", response_model=MergeResponse, summary="Merge two drafts into a new manuscript")
async def merge_manuscripts(
    payload: MergeRequest,
    service: CompareService = Depends(get_compare_service),
    actor_id: str = Depends(get_actor_id),
) -> MergeResponse:
    report = await service.merge(
        payload.manuscript_id_a,
        payload.manuscript_id_b,
        payload.merged_title,
        [instruction.model_dump() for instruction in payload.instructions],
        actor_id,
    )
    logger.info("merge_request_completed", manuscript_id=report.manuscript_id, actor_id=actor_id)
    return MergeResponse.from_report(report)

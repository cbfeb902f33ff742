"""Knowledge retrieval tests (retriever policy + in-process scan index)."""

import uuid

import httpx
import numpy as np
import pytest

from ai_fakes import FakeKnowledgeIndex, FakeProvider
from helpdesk.core.exceptions import KnowledgeSearchError
from helpdesk.db.models import KnowledgeBaseEmbedding
from helpdesk.services.knowledge_index import (
    EmbeddingScanKnowledgeIndex,
    KnowledgePassage,
    PostgresKnowledgeIndex,
    cosine_similarities,
    get_knowledge_index,
)
from helpdesk.services.knowledge_retriever import KnowledgeRetriever


def _passage(source_id: str, similarity: float) -> KnowledgePassage:
    return KnowledgePassage(
        source_type="faq",
        source_id=source_id,
        content=f"content {source_id}",
        similarity=similarity,
    )


@pytest.mark.asyncio
async def test_retriever_passes_threshold_and_count():
    org_id = uuid.uuid4()
    index = FakeKnowledgeIndex([_passage("a", 0.9)])
    retriever = KnowledgeRetriever(index, match_threshold=0.7, match_count=3)

    passages = await retriever.retrieve("reset password", org_id)

    assert [p.source_id for p in passages] == ["a"]
    assert index.calls == [
        {
            "query": "reset password",
            "organization_id": org_id,
            "match_threshold": 0.7,
            "match_count": 3,
        }
    ]


@pytest.mark.asyncio
async def test_retriever_keeps_index_order():
    index = FakeKnowledgeIndex([_passage("low", 0.71), _passage("high", 0.95)])
    retriever = KnowledgeRetriever(index, match_threshold=0.7, match_count=3)

    passages = await retriever.retrieve("q", uuid.uuid4())

    assert [p.source_id for p in passages] == ["low", "high"]


@pytest.mark.asyncio
async def test_retriever_empty_result_is_valid():
    retriever = KnowledgeRetriever(FakeKnowledgeIndex(), match_threshold=0.7, match_count=3)
    assert await retriever.retrieve("q", uuid.uuid4()) == []


@pytest.mark.asyncio
async def test_retriever_wraps_index_failures():
    index = FakeKnowledgeIndex(error=httpx.ReadTimeout("timed out"))
    retriever = KnowledgeRetriever(index, match_threshold=0.7, match_count=3)

    with pytest.raises(KnowledgeSearchError):
        await retriever.retrieve("q", uuid.uuid4())


def test_cosine_similarities():
    matrix = np.array([[1.0, 0.0], [0.0, 1.0], [0.0, 0.0], [3.0, 4.0]])

    scores = cosine_similarities([1.0, 0.0], matrix)

    assert scores.tolist() == pytest.approx([1.0, 0.0, 0.0, 0.6])
    assert cosine_similarities([0.0, 0.0], matrix).tolist() == [0.0, 0.0, 0.0, 0.0]
    with pytest.raises(ValueError):
        cosine_similarities([1.0], matrix)



def test_index_factory(db, fake_provider):
    assert isinstance(get_knowledge_index("scan", db, fake_provider), EmbeddingScanKnowledgeIndex)
    assert isinstance(get_knowledge_index("postgres", db, fake_provider), PostgresKnowledgeIndex)
    with pytest.raises(ValueError):
        get_knowledge_index("elastic", db, fake_provider)


@pytest.mark.asyncio
async def test_scan_index_filters_sorts_and_scopes_to_org(db, test_org):
    other_org_id = uuid.uuid4()
    rows = [
        ("exact", test_org.id, [1.0, 0.0, 0.0]),
        ("close", test_org.id, [0.9, 0.3, 0.0]),
        ("far", test_org.id, [0.0, 1.0, 0.0]),
        ("other-org", other_org_id, [1.0, 0.0, 0.0]),
    ]
    for source_id, org_id, vector in rows:
        db.add(
            KnowledgeBaseEmbedding(
                organization_id=org_id,
                source_type="article",
                source_id=source_id,
                chunk_index=0,
                content=f"chunk {source_id}",
                content_embedding=vector,
                metadata_={"total_chunks": 1},
            )
        )
    db.commit()

    provider = FakeProvider(embeddings={"reset password": [1.0, 0.0, 0.0]})
    index = EmbeddingScanKnowledgeIndex(db, provider)
    passages = await index.search(
        "reset password", organization_id=test_org.id, match_threshold=0.7, match_count=3
    )

    assert [p.source_id for p in passages] == ["exact", "close"]
    assert passages[0].similarity == pytest.approx(1.0)
    assert passages[0].metadata == {"total_chunks": 1}
    assert provider.embedded == ["reset password"]

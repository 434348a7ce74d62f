# tests/integration/rag/test_int_chromadb_index.py — v1
"""ChromaDB similarity index against a local persistent client."""

from __future__ import annotations

import uuid

import pytest

pytest.importorskip("chromadb")

from readlearn.cache.fingerprint import content_hash  # noqa: E402
from readlearn.core.models import ArticleEmbeddingEntry  # noqa: E402
from readlearn.rag.vector_store.chromadb_store import (  # noqa: E402
    ChromaDBSimilarityIndex,
    _record_id,
    _to_metadata,
)
from tests.fakes import ARTICLE_FR, UNRELATED_FR, FakeEmbedder  # noqa: E402

pytestmark = pytest.mark.integration


@pytest.fixture
def index(tmp_path):
    idx = ChromaDBSimilarityIndex(
        collection=f"test_{uuid.uuid4().hex[:8]}", persist_path=str(tmp_path / "chroma")
    )
    yield idx
    idx.close()


def _entry(url: str, text: str, level: str = "B2") -> ArticleEmbeddingEntry:
    return ArticleEmbeddingEntry(
        url=url,
        url_hash=content_hash(url),
        text_preview=text[:500],
        embedding=FakeEmbedder().embed_query(text),
        cefr_level=level,
        language="fr",
        word_count=len(text.split()),
    )


class TestChromaDBSimilarityIndex:

    @pytest.mark.asyncio
    async def test_upsert_and_find(self, index):
        await index.upsert(_entry("https://a.fr/1", ARTICLE_FR))
        await index.upsert(_entry("https://a.fr/2", UNRELATED_FR, level="A2"))
        assert await index.count() == 2

        query = FakeEmbedder().embed_query("Mise à jour. " + ARTICLE_FR)
        matches = await index.find_similar(query, threshold=0.90, limit=1)
        assert len(matches) == 1
        assert matches[0].url == "https://a.fr/1"
        assert matches[0].entry.cefr_level == "B2"
        assert matches[0].similarity > 0.90

    @pytest.mark.asyncio
    async def test_nothing_above_threshold(self, index):
        await index.upsert(_entry("https://a.fr/2", UNRELATED_FR))
        query = FakeEmbedder().embed_query(ARTICLE_FR)
        assert await index.find_similar(query, threshold=0.90, limit=1) == []

    @pytest.mark.asyncio
    async def test_upsert_replaces_by_url(self, index):
        await index.upsert(_entry("https://a.fr/1", ARTICLE_FR, level="B1"))
        await index.upsert(_entry("https://a.fr/1", ARTICLE_FR, level="C1"))
        assert await index.count() == 1
        assert (await index.get("https://a.fr/1")).cefr_level == "C1"

    @pytest.mark.asyncio
    async def test_touch(self, index):
        await index.upsert(_entry("https://a.fr/1", ARTICLE_FR))
        await index.touch("https://a.fr/1")
        assert (await index.get("https://a.fr/1")).access_count == 2
        await index.touch("https://a.fr/unknown")

    @pytest.mark.asyncio
    async def test_empty_collection(self, index):
        assert await index.find_similar([1.0] * 512, threshold=0.5) == []
        assert await index.get("https://nowhere") is None

    @pytest.mark.asyncio
    async def test_urls_differing_in_case_are_distinct(self, index):
        await index.upsert(_entry("https://x.fr/A", ARTICLE_FR, level="B1"))
        await index.upsert(_entry("https://x.fr/a", UNRELATED_FR, level="A2"))
        assert await index.count() == 2
        assert (await index.get("https://x.fr/A")).cefr_level == "B1"
        assert (await index.get("https://x.fr/a")).cefr_level == "A2"

        await index.touch("https://x.fr/A")
        assert (await index.get("https://x.fr/A")).access_count == 2
        assert (await index.get("https://x.fr/a")).access_count == 1

    @pytest.mark.asyncio
    async def test_malformed_record_yields_no_match(self, index):
        entry = _entry("https://a.fr/1", ARTICLE_FR)
        await index.upsert(entry)
        metadata = _to_metadata(entry)
        metadata["created_at"] = "garbage"
        index._collection.update(ids=[_record_id(entry.url)], metadatas=[metadata])

        query = FakeEmbedder().embed_query(ARTICLE_FR)
        assert await index.find_similar(query, threshold=0.90, limit=1) == []

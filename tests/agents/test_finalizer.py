"""Tests for the finalizer agent."""

from __future__ import annotations

import pytest

from content_engine.agents.finalizer import STAMPED_FIELDS, FinalizerAgent
from content_engine.config import Config
from content_engine.models import CatalogEntry, FinalArticle
from tests import factories as f
from tests.factories import FakeClient


@pytest.mark.unit
class TestFinalizerAgent:
    """Test publication formatting."""

    def test_schema_hides_stamped_fields(self, config: Config) -> None:
        """Values the orchestrator stamps are not requested from the model."""
        schema = FinalizerAgent(FakeClient(), config).json_schema()

        for field in STAMPED_FIELDS:
            assert field not in schema["properties"]
        assert "internal_links" in schema["properties"]
        assert "quality_score" in FinalArticle.model_json_schema()["properties"]

    async def test_slug_restored(self, config: Config) -> None:
        """A renamed slug is put back to the draft's slug."""
        client = FakeClient(f.final_article(slug="a-shinier-slug"))
        current = f.draft(3)

        result = await FinalizerAgent(client, config).run(current, f.seo_research())

        assert result.success
        assert result.data.slug == current.slug
        assert client.calls[0]["max_tokens"] == 16000

    async def test_sources_default_to_draft(self, config: Config) -> None:
        """An article with no sources inherits the draft's citations."""
        article = f.final_article("draft-0-slug").model_copy(update={"sources": []})

        result = await FinalizerAgent(FakeClient(article), config).run(f.draft(0), f.seo_research())

        assert result.data.sources == ["Source 0"]

    async def test_catalog_in_prompt(self, config: Config) -> None:
        """Catalog entries are offered as link targets."""
        client = FakeClient(f.final_article())
        catalog = [CatalogEntry(title="Ozempic dosing guide", slug="ozempic-dosing")]

        await FinalizerAgent(client, config).run(f.draft(0), f.seo_research(), catalog)

        assert '"Ozempic dosing guide" (/ozempic-dosing)' in client.calls[0]["prompt"]

    async def test_empty_catalog(self, config: Config) -> None:
        """Without a catalog the model is told to return no links."""
        client = FakeClient(f.final_article())

        await FinalizerAgent(client, config).run(f.draft(0), f.seo_research())

        assert "return an empty list" in client.calls[0]["prompt"]

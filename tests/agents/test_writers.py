"""Tests for the writer personas and revision agent."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from content_engine.agents.writers import PERSONA_PROMPTS, RevisionAgent, WriterAgent
from content_engine.config import Config
from content_engine.pipeline.orchestrator import AgentSuite
from tests import factories as f
from tests.factories import FakeClient


@pytest.mark.unit
class TestWriterAgent:
    """Test persona writers."""

    def test_unknown_persona(self, config: Config) -> None:
        """Only the four known personas are accepted."""
        with pytest.raises(ValueError, match="Unknown writer persona"):
            WriterAgent("sarcastic", FakeClient(), config)

    @pytest.mark.parametrize("persona", sorted(PERSONA_PROMPTS))
    def test_persona_prompt_and_name(self, persona: str, config: Config) -> None:
        """Each persona appends its own voice to the shared system prompt."""
        writer = WriterAgent(persona, FakeClient(), config)

        assert writer.name == f"writer-{persona}"
        assert writer.system_prompt.endswith(PERSONA_PROMPTS[persona])

    async def test_angle_forced_to_persona(self, config: Config) -> None:
        """A draft labelled with the wrong angle is relabelled."""
        client = FakeClient(f.draft(0, angle="clinical"))
        writer = WriterAgent("empathetic", client, config)

        result = await writer.run("semaglutide side effects", f.brief())

        assert result.success
        assert result.data.angle == "empathetic"
        assert client.calls[0]["agent_name"] == "writer-empathetic"
        assert "semaglutide side effects" in client.calls[0]["prompt"]

    async def test_failure_is_a_result(self, config: Config) -> None:
        """A provider error yields a failed result."""
        writer = WriterAgent("practical", FakeClient(RuntimeError("overloaded")), config)

        result = await writer.run("metformin", f.brief())

        assert not result.success
        assert "writer-practical" in result.error


@pytest.mark.unit
class TestWriterRouting:
    """Test per-writer provider routing."""

    def test_innovative_writer_gets_direct_deepseek_client(self, config: Config) -> None:
        """Writers with a provider bypass the dispatcher; the rest share it."""
        dispatcher = MagicMock(name="dispatcher")
        deepseek = MagicMock(name="deepseek")
        with patch("content_engine.pipeline.orchestrator.ClientFactory") as MockFactory:
            MockFactory.create_dispatcher.return_value = dispatcher
            MockFactory.create.return_value = deepseek

            suite = AgentSuite.from_config(config)

        clients = {writer.persona: writer.client for writer in suite.writers}
        assert clients["innovative"] is deepseek
        assert clients["clinical"] is dispatcher
        assert clients["empathetic"] is dispatcher
        assert clients["practical"] is dispatcher
        MockFactory.create.assert_called_once_with("deepseek", config, None)
        assert suite.judge.client is dispatcher


@pytest.mark.unit
class TestRevisionAgent:
    """Test draft revision."""

    async def test_prompt_lists_both_fix_groups(self, config: Config) -> None:
        """Medical and editorial fixes appear in separate sections."""
        client = FakeClient(f.draft(1))
        current = f.draft(0)

        await RevisionAgent(client, config).run(current, ["Add dosing caveat"], ["Shorten intro"])

        prompt = client.calls[0]["prompt"]
        assert "MEDICAL ACCURACY ISSUES" in prompt
        assert "- Add dosing caveat" in prompt
        assert "- Shorten intro" in prompt

    async def test_slug_and_angle_preserved(self, config: Config) -> None:
        """The revised draft keeps the original slug and angle."""
        client = FakeClient(f.draft(7, angle="innovative"))
        current = f.draft(0, angle="clinical")

        result = await RevisionAgent(client, config).run(current, ["fix"], [])

        assert result.success
        assert result.data.slug == current.slug
        assert result.data.angle == "clinical"
        assert result.data.title == "Draft 7 title"

    async def test_empty_sources_fall_back_to_previous(self, config: Config) -> None:
        """A revision that drops every source keeps the earlier citations."""
        revised = f.draft(0).model_copy(update={"sources_cited": []})
        current = f.draft(0)

        result = await RevisionAgent(FakeClient(revised), config).run(current, [], ["fix"])

        assert result.data.sources_cited == current.sources_cited

    async def test_empty_fix_lists(self, config: Config) -> None:
        """No fixes in a group renders a placeholder."""
        client = FakeClient(f.draft(0))

        await RevisionAgent(client, config).run(f.draft(0), [], [])

        assert "- (none)" in client.calls[0]["prompt"]

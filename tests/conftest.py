"""Shared fixtures."""

from __future__ import annotations

import pytest

from content_engine.config import Config, PipelineConfig
from content_engine.pipeline.orchestrator import AgentSuite
from content_engine.telemetry import MemorySink
from tests import factories as f


@pytest.fixture
def config() -> Config:
    """Default configuration with no batch delay."""
    return Config(pipeline=PipelineConfig(batch_delay_seconds=0))


@pytest.fixture
def sink() -> MemorySink:
    """In-memory telemetry sink."""
    return MemorySink()


@pytest.fixture
def drafts() -> list:
    """Four drafts, one per default persona."""
    angles = ["clinical", "empathetic", "practical", "innovative"]
    return [f.draft(i, angle) for i, angle in enumerate(angles)]


@pytest.fixture
def suite(drafts: list) -> AgentSuite:
    """Agent suite where every agent succeeds and both critics approve first time."""
    return AgentSuite(
        seo=f.fake_agent("seo-research", f.ok(f.seo_research(), 100)),
        medical=f.fake_agent("medical-research", f.ok(f.medical_research(), 100)),
        competitor=f.fake_agent("competitor-research", f.ok(f.competitor_research(), 100)),
        synthesizer=f.fake_agent("synthesizer", f.ok(f.brief(1800), 50)),
        writers=[f.fake_agent(f"writer-{d.angle}", f.ok(d, 200)) for d in drafts],
        judge=f.fake_agent("judge", f.ok(f.judge_outcome(drafts[0], 0), 40)),
        medical_critic=f.fake_agent("medical-critic", f.ok(f.medical_critique(True), 30)),
        editorial_critic=f.fake_agent("editorial-critic", f.ok(f.editorial_critique(True, 8.0), 30)),
        revision=f.fake_agent("revision", f.ok(f.draft(9, "clinical"), 60)),
        finalizer=f.fake_agent("finalizer", f.ok(f.final_article(drafts[0].slug), 70)),
    )

"""Content pipeline orchestrator

Drives one keyword through six ordered phases:

    ┌──────────┐   ┌───────────┐   ┌──────────┐   ┌─────────┐
    │ RESEARCH │──▶│ SYNTHESIS │──▶│ DRAFTING │──▶│ JUDGING │
    │ (x3, ‖)  │   └───────────┘   │ (xN, ‖)  │   └────┬────┘
    └──────────┘                   └──────────┘        │ current draft
                                                       ▼
                  ┌──────────┐  not approved   ┌──────────────┐
                  │ REVISION │◀────────────────│   CRITIQUE   │
                  └────┬─────┘                 │ (medical,    │
                       │  new current draft    │  editorial)  │
                       └──────────────────────▶└──────┬───────┘
                                                      │ approved or cap reached
                                                      ▼
                                               ┌──────────────┐
                                               │ FINALIZATION │
                                               └──────────────┘

Each phase gates the next. Agents report failure as values; the
orchestrator decides abort or continue, and run() always returns a
PipelineResult instead of raising.
"""

import asyncio
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from ..agents import (
    CompetitorResearchAgent,
    EditorialCriticAgent,
    FinalizerAgent,
    JudgeAgent,
    MedicalCriticAgent,
    MedicalResearchAgent,
    RevisionAgent,
    SEOResearchAgent,
    SynthesizerAgent,
    WriterAgent,
    run_critique,
)
from ..config import Config, get_config
from ..llm.base import ProgressCallback
from ..llm.factory import ClientFactory
from ..models import (
    AgentResult,
    CatalogEntry,
    FinalArticle,
    Keyword,
    PipelineResult,
    PipelineState,
    PipelineStatus,
)
from ..telemetry import AGENT, ERROR, INFO, PHASE, WARN, LogEntry, LoggingSink, TelemetrySink

logger = logging.getLogger(__name__)


class PhaseFailure(Exception):
    """A phase's success gate was not met"""

    def __init__(self, phase: PipelineStatus, message: str):
        self.phase = phase
        super().__init__(message)


class AgentSuite:
    """The full set of agents one orchestrator run uses"""

    def __init__(
        self,
        seo: SEOResearchAgent,
        medical: MedicalResearchAgent,
        competitor: CompetitorResearchAgent,
        synthesizer: SynthesizerAgent,
        writers: Sequence[WriterAgent],
        judge: JudgeAgent,
        medical_critic: MedicalCriticAgent,
        editorial_critic: EditorialCriticAgent,
        revision: RevisionAgent,
        finalizer: FinalizerAgent,
    ):
        self.seo = seo
        self.medical = medical
        self.competitor = competitor
        self.synthesizer = synthesizer
        self.writers = list(writers)
        self.judge = judge
        self.medical_critic = medical_critic
        self.editorial_critic = editorial_critic
        self.revision = revision
        self.finalizer = finalizer

    @classmethod
    def from_config(
        cls,
        config: Optional[Config] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> "AgentSuite":
        """
        Build every agent on the configured dispatcher.

        Writers with an explicit provider get a direct client for that
        provider instead of the dispatcher.

        Args:
            config: Optional configuration object
            progress_callback: Optional progress hook passed to every client

        Returns:
            AgentSuite ready for ContentOrchestrator
        """
        if config is None:
            config = get_config()

        dispatcher = ClientFactory.create_dispatcher(config, progress_callback)

        direct_clients = {}
        writers = []
        for writer in config.writers:
            client = dispatcher
            if writer.provider:
                if writer.provider not in direct_clients:
                    direct_clients[writer.provider] = ClientFactory.create(
                        writer.provider, config, progress_callback
                    )
                client = direct_clients[writer.provider]
            writers.append(WriterAgent(writer.persona, client, config))

        logger.info(
            f"Built agent suite with {len(writers)} writer(s): "
            f"{', '.join(w.persona for w in writers)}"
        )

        return cls(
            seo=SEOResearchAgent(dispatcher, config),
            medical=MedicalResearchAgent(dispatcher, config),
            competitor=CompetitorResearchAgent(dispatcher, config),
            synthesizer=SynthesizerAgent(dispatcher, config),
            writers=writers,
            judge=JudgeAgent(dispatcher, config),
            medical_critic=MedicalCriticAgent(dispatcher, config),
            editorial_critic=EditorialCriticAgent(dispatcher, config),
            revision=RevisionAgent(dispatcher, config),
            finalizer=FinalizerAgent(dispatcher, config),
        )


class ContentOrchestrator:
    """
    Runs the full pipeline for one keyword.

    The orchestrator exclusively owns its PipelineState; create one
    orchestrator per run.
    """

    def __init__(
        self,
        keyword: Union[Keyword, str],
        agents: Optional[AgentSuite] = None,
        config: Optional[Config] = None,
        telemetry: Optional[TelemetrySink] = None,
        catalog: Optional[List[CatalogEntry]] = None,
        max_revisions: Optional[int] = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            keyword: Keyword to write about (plain text gets the id "manual")
            agents: Agent suite; built from config when omitted
            config: Optional configuration object
            telemetry: Destination for log entries (defaults to LoggingSink)
            catalog: Existing content available for internal links
            max_revisions: Override for pipeline.max_revisions
        """
        if config is None:
            config = get_config()

        if isinstance(keyword, str):
            keyword = Keyword(id="manual", text=keyword)

        if max_revisions is None:
            max_revisions = config.pipeline.max_revisions
        if max_revisions < 0:
            raise ValueError("max_revisions must be >= 0")

        self.config = config
        self.agents = agents or AgentSuite.from_config(config)
        self.telemetry = telemetry if telemetry is not None else LoggingSink()
        self.catalog = catalog
        self.min_drafts = config.pipeline.min_drafts
        self.state = PipelineState(keyword=keyword, max_revisions=max_revisions)

    # Logging

    async def log(
        self,
        level: str,
        source: str,
        message: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Append to the run log and forward to telemetry; sink errors are ignored"""
        entry = LogEntry(
            run_id=self.state.run_id,
            level=level,
            source=source,
            message=message,
            metadata=metadata or {},
        )
        self.state.log.append(entry.format())
        try:
            await self.telemetry.emit(entry)
        except Exception as e:
            logger.debug(f"Telemetry sink failed: {e}")

    async def _log_agent(self, name: str, result: AgentResult) -> None:
        if result.success:
            await self.log(
                AGENT,
                name,
                "complete",
                {"tokens": result.tokens_used, "provider": result.provider},
            )
        else:
            await self.log(AGENT, name, f"error: {result.error}", {"tokens": result.tokens_used})

    async def _enter(self, status: PipelineStatus, message: str) -> None:
        self.state.status = status
        await self.log(PHASE, status.value, message)

    def _add_tokens(self, *results: AgentResult) -> int:
        tokens = sum(r.tokens_used for r in results)
        self.state.total_tokens += tokens
        return tokens

    # Phases

    async def _research(self) -> None:
        state = self.state
        topic = state.keyword.text
        await self._enter(PipelineStatus.RESEARCHING, "Running SEO, medical and competitor research")

        named: List[Tuple[str, Any]] = [
            (self.agents.seo.name, self.agents.seo),
            (self.agents.medical.name, self.agents.medical),
            (self.agents.competitor.name, self.agents.competitor),
        ]
        for name, _ in named:
            await self.log(AGENT, name, "start")

        results = await asyncio.gather(*(agent.run(topic) for _, agent in named))
        tokens = self._add_tokens(*results)

        failures = []
        for (name, _), result in zip(named, results):
            await self._log_agent(name, result)
            if not result.success:
                failures.append(result.error)

        if failures:
            raise PhaseFailure(
                PipelineStatus.RESEARCHING, f"Research failed: {'; '.join(failures)}"
            )

        state.seo_research, state.medical_research, state.competitor_research = (
            r.data for r in results
        )
        await self.log(INFO, PipelineStatus.RESEARCHING.value, "Research complete", {"tokens": tokens})

    async def _synthesize(self) -> None:
        state = self.state
        await self._enter(PipelineStatus.SYNTHESIZING, "Synthesizing research into a brief")

        agent = self.agents.synthesizer
        await self.log(AGENT, agent.name, "start")
        result = await agent.run(
            state.keyword.text,
            state.seo_research,
            state.medical_research,
            state.competitor_research,
        )
        self._add_tokens(result)
        await self._log_agent(agent.name, result)

        if not result.success:
            raise PhaseFailure(PipelineStatus.SYNTHESIZING, f"Synthesis failed: {result.error}")

        state.brief = result.data
        await self.log(
            INFO,
            PipelineStatus.SYNTHESIZING.value,
            f"Brief ready: {state.brief.primary_angle}",
            {"word_count": state.brief.word_count},
        )

    async def _draft(self) -> None:
        state = self.state
        writers = self.agents.writers
        await self._enter(PipelineStatus.DRAFTING, f"Drafting with {len(writers)} writers")

        for writer in writers:
            await self.log(AGENT, writer.name, "start")

        results = await asyncio.gather(
            *(writer.run(state.keyword.text, state.brief) for writer in writers)
        )
        self._add_tokens(*results)

        drafts = []
        for writer, result in zip(writers, results):
            await self._log_agent(writer.name, result)
            if result.success and result.data is not None:
                drafts.append(result.data)

        if len(drafts) < self.min_drafts:
            raise PhaseFailure(
                PipelineStatus.DRAFTING,
                f"Insufficient drafts to compare: {len(drafts)} of {len(writers)} "
                f"writers succeeded, need {self.min_drafts}",
            )

        state.drafts = drafts
        await self.log(INFO, PipelineStatus.DRAFTING.value, f"{len(drafts)} drafts ready")

    async def _judge(self) -> None:
        state = self.state
        await self._enter(PipelineStatus.JUDGING, f"Judging {len(state.drafts)} drafts")

        agent = self.agents.judge
        await self.log(AGENT, agent.name, "start")
        result = await agent.run(state.drafts, state.brief)
        self._add_tokens(result)
        await self._log_agent(agent.name, result)

        if not result.success:
            raise PhaseFailure(PipelineStatus.JUDGING, f"Judging failed: {result.error}")

        outcome = result.data
        state.judge_decision = outcome.decision
        state.selected_draft = outcome.selected_draft
        state.current_draft = outcome.selected_draft
        state.draft_history.append(outcome.selected_draft)

        await self.log(
            INFO,
            PipelineStatus.JUDGING.value,
            f"Selected draft {outcome.decision.winner} ({outcome.selected_draft.angle})",
            {"synthesized": outcome.synthesized},
        )

    async def _critique_loop(self) -> None:
        state = self.state

        while state.revision_count < state.max_revisions:
            await self._enter(
                PipelineStatus.CRITIQUING,
                f"Critique iteration {state.revision_count + 1}/{state.max_revisions}",
            )

            critique = await run_critique(
                state.current_draft,
                self.agents.medical_critic,
                self.agents.editorial_critic,
            )
            self.state.total_tokens += critique.tokens_used

            if critique.medical is not None:
                state.medical_critique = critique.medical
            if critique.editorial is not None:
                state.editorial_critique = critique.editorial

            await self.log(
                AGENT,
                self.agents.medical_critic.name,
                "approved" if critique.medical and critique.medical.approved else "not approved",
                {"failed": critique.medical is None},
            )
            await self.log(
                AGENT,
                self.agents.editorial_critic.name,
                "approved" if critique.editorial and critique.editorial.approved else "not approved",
                {
                    "failed": critique.editorial is None,
                    "score": critique.editorial.overall_score if critique.editorial else None,
                },
            )

            if critique.approved:
                state.approved = True
                await self.log(INFO, PipelineStatus.CRITIQUING.value, "Both critics approved")
                return

            await self._enter(
                PipelineStatus.REVISING,
                f"Revising: {len(critique.revision_needed)} fix(es) requested",
            )
            agent = self.agents.revision
            await self.log(AGENT, agent.name, "start")
            result = await agent.run(
                state.current_draft, critique.medical_fixes, critique.editorial_fixes
            )
            self._add_tokens(result)
            await self._log_agent(agent.name, result)

            if not result.success:
                raise PhaseFailure(PipelineStatus.REVISING, f"Revision failed: {result.error}")

            state.current_draft = result.data
            state.draft_history.append(result.data)
            state.revision_count += 1
            await self.log(INFO, PipelineStatus.REVISING.value, f"Revision {state.revision_count} complete")

        await self.log(
            WARN,
            PipelineStatus.CRITIQUING.value,
            f"Max revisions ({state.max_revisions}) reached without approval, "
            f"proceeding with current draft",
        )
        logger.warning(
            f"Keyword '{state.keyword.text}' finalizing unapproved draft after "
            f"{state.revision_count} revision(s)"
        )

    async def _finalize(self) -> FinalArticle:
        state = self.state
        await self._enter(PipelineStatus.FINALIZING, "Running SEO finalization")

        agent = self.agents.finalizer
        await self.log(AGENT, agent.name, "start")
        result = await agent.run(state.current_draft, state.seo_research, self.catalog)
        self._add_tokens(result)
        await self._log_agent(agent.name, result)

        if not result.success:
            raise PhaseFailure(PipelineStatus.FINALIZING, f"Finalization failed: {result.error}")

        quality_score = state.editorial_critique.overall_score if state.editorial_critique else 0.0
        article = result.data.model_copy(
            update={
                "iterations": state.revision_count + 1,
                "quality_score": quality_score,
                "total_tokens": state.total_tokens,
                "degraded": not state.approved,
            }
        )

        state.final_article = article
        state.status = PipelineStatus.COMPLETE
        state.completed_at = datetime.now()

        duration = (state.completed_at - state.started_at).total_seconds()
        await self.log(
            PHASE,
            PipelineStatus.COMPLETE.value,
            f"Pipeline complete: {article.title}",
            {
                "quality_score": article.quality_score,
                "iterations": article.iterations,
                "total_tokens": article.total_tokens,
                "degraded": article.degraded,
                "duration_seconds": duration,
            },
        )
        return article

    # Entry point

    async def run(self) -> PipelineResult:
        """
        Execute every phase in order.

        Returns:
            PipelineResult; success is False with state.errors populated on failure
        """
        state = self.state
        await self.log(
            PHASE,
            "orchestrator",
            f'Starting pipeline for "{state.keyword.text}"',
            {"keyword_id": state.keyword.id, "max_revisions": state.max_revisions},
        )

        try:
            await self._research()
            await self._synthesize()
            await self._draft()
            await self._judge()
            await self._critique_loop()
            article = await self._finalize()
        except PhaseFailure as e:
            return await self._fail(str(e))
        except Exception as e:
            logger.exception(f"Unexpected pipeline error for '{state.keyword.text}'")
            return await self._fail(f"Unexpected error in {state.status.value}: {e}")

        return PipelineResult(success=True, article=article, state=state)

    async def _fail(self, message: str) -> PipelineResult:
        state = self.state
        failed_phase = state.status.value
        state.errors.append(message)
        state.status = PipelineStatus.FAILED
        state.completed_at = datetime.now()
        await self.log(ERROR, failed_phase, message, {"total_tokens": state.total_tokens})
        logger.error(f"Pipeline failed for '{state.keyword.text}': {message}")
        return PipelineResult(success=False, article=None, state=state)

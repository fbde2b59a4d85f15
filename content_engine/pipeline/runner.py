"""Keyword runner: queue -> orchestrator -> publisher -> record store"""

import asyncio
import logging
from typing import Callable, List, Optional

from ..config import Config, get_config
from ..models import CatalogEntry, ContentRecord, Keyword, KeywordStatus
from ..telemetry import TelemetrySink, configure_logging
from .orchestrator import AgentSuite, ContentOrchestrator
from .stores import ContentPublisher, ContentStore, KeywordSource

logger = logging.getLogger(__name__)

MANUAL_KEYWORD_ID = "manual"

OrchestratorFactory = Callable[[Keyword, List[CatalogEntry]], ContentOrchestrator]


class ContentRunner:
    """
    Generates and publishes articles for queued keywords.

    Keyword status moves queued -> generating -> published | review | error.
    Keywords with the id "manual" did not come from the queue and are never
    written back to it.
    """

    def __init__(
        self,
        keywords: KeywordSource,
        store: ContentStore,
        publisher: ContentPublisher,
        config: Optional[Config] = None,
        telemetry: Optional[TelemetrySink] = None,
        orchestrator_factory: Optional[OrchestratorFactory] = None,
    ):
        """
        Initialize the runner.

        Args:
            keywords: Keyword queue
            store: Content record store (also supplies the link catalog)
            publisher: Headless content publisher
            config: Optional configuration object
            telemetry: Telemetry sink handed to each orchestrator
            orchestrator_factory: (keyword, catalog) -> ContentOrchestrator;
                defaults to orchestrators sharing one agent suite
        """
        if config is None:
            config = get_config()

        configure_logging(config.logging.level, config.logging.format)

        self.keywords = keywords
        self.store = store
        self.publisher = publisher
        self.config = config
        self.telemetry = telemetry
        self.orchestrator_factory = orchestrator_factory or self._default_orchestrator
        self._agents: Optional[AgentSuite] = None

    def _default_orchestrator(
        self, keyword: Keyword, catalog: List[CatalogEntry]
    ) -> ContentOrchestrator:
        if self._agents is None:
            self._agents = AgentSuite.from_config(self.config)
        return ContentOrchestrator(
            keyword,
            agents=self._agents,
            config=self.config,
            telemetry=self.telemetry,
            catalog=catalog,
        )

    async def _set_status(self, keyword: Keyword, status: KeywordStatus) -> None:
        if keyword.id == MANUAL_KEYWORD_ID:
            return
        await self.keywords.update_status(keyword.id, status)

    async def generate_article(self, keyword: Keyword) -> bool:
        """
        Run the pipeline for one keyword and publish the result.

        Args:
            keyword: Keyword to write about

        Returns:
            True if an article was published and recorded
        """
        logger.info(f'Starting: "{keyword.text}"')
        threshold = self.config.pipeline.quality_threshold

        try:
            await self._set_status(keyword, KeywordStatus.GENERATING)

            catalog = await self.store.list_published()
            orchestrator = self.orchestrator_factory(keyword, catalog)
            result = await orchestrator.run()

            if not result.success or result.article is None:
                logger.error(
                    f'Generation failed for "{keyword.text}": {"; ".join(result.state.errors)}'
                )
                await self._set_status(keyword, KeywordStatus.ERROR)
                return False

            article = result.article

            logger.info("Publishing article...")
            external_id = await self.publisher.publish(article, keyword)
            logger.info(f"Published with id {external_id}")

            meets_threshold = article.quality_score >= threshold
            await self.store.create_record(
                ContentRecord(
                    keyword_id=None if keyword.id == MANUAL_KEYWORD_ID else keyword.id,
                    title=article.title,
                    slug=article.slug,
                    body=article.body,
                    meta_description=article.meta_description,
                    quality_score=article.quality_score,
                    iterations=article.iterations,
                    status="draft" if meets_threshold else "review",
                    external_content_id=external_id,
                )
            )

            final_status = KeywordStatus.PUBLISHED if meets_threshold else KeywordStatus.REVIEW
            await self._set_status(keyword, final_status)

            logger.info(
                f'Complete: "{keyword.text}" -> {final_status.value} '
                f"(quality {article.quality_score}/10, {article.iterations} iteration(s), "
                f"{article.total_tokens} tokens)"
            )
            return True

        except Exception as e:
            logger.error(f'Error processing "{keyword.text}": {e}')
            try:
                await self._set_status(keyword, KeywordStatus.ERROR)
            except Exception as status_error:
                logger.error(f"Failed to mark keyword {keyword.id} as error: {status_error}")
            return False

    async def run_batch(self, limit: Optional[int] = None) -> List[bool]:
        """
        Process queued keywords one after another.

        Args:
            limit: Maximum keywords to process (defaults to pipeline.batch_size)

        Returns:
            Per-keyword success flags in processing order
        """
        if limit is None:
            limit = self.config.pipeline.batch_size
        queued = await self.keywords.fetch_queued(limit)

        if not queued:
            logger.warning("No keywords queued")
            return []

        logger.info(f"Processing {len(queued)} keyword(s)")
        outcomes = []
        for i, keyword in enumerate(queued):
            outcomes.append(await self.generate_article(keyword))
            if i < len(queued) - 1 and self.config.pipeline.batch_delay_seconds > 0:
                await asyncio.sleep(self.config.pipeline.batch_delay_seconds)

        logger.info(f"Batch complete: {sum(outcomes)}/{len(outcomes)} succeeded")
        return outcomes

"""Finalizer agent: last-mile SEO pass producing the publishable article"""

import logging
from datetime import date
from typing import Any, Dict, List, Optional

from ..models import ArticleDraft, CatalogEntry, FinalArticle, SEOResearch
from .base import Agent

logger = logging.getLogger(__name__)


FINALIZER_SYSTEM_PROMPT = """You are an SEO specialist preparing an approved medical article for
publication. You tighten the title and meta description, add internal links
where they genuinely help the reader, and produce Article schema markup.
Make surgical edits only. Never change medical claims, doses or warnings."""

# Stamped by the orchestrator, never produced by the model
STAMPED_FIELDS = ("quality_score", "iterations", "total_tokens", "degraded")


class FinalizerAgent(Agent):
    """Optimizes title, meta and internal links without altering the medicine"""

    name = "finalizer"
    system_prompt = FINALIZER_SYSTEM_PROMPT
    response_model = FinalArticle
    max_tokens = 16000
    temperature = 0.3

    def json_schema(self) -> Dict[str, Any]:
        schema = FinalArticle.model_json_schema()
        properties = schema.get("properties", {})
        for field in STAMPED_FIELDS:
            properties.pop(field, None)
        return schema

    def build_prompt(
        self,
        draft: ArticleDraft,
        seo: SEOResearch,
        catalog: Optional[List[CatalogEntry]] = None,
    ) -> str:
        if catalog:
            links = "\n".join(f'- "{entry.title}" (/{entry.slug})' for entry in catalog)
            link_context = f"EXISTING CONTENT TO LINK TO:\n{links}"
        else:
            link_context = "No existing content is available for internal links; return an empty list."

        return f"""Finalize this article for publication.

ARTICLE:
Title: {draft.title}
Meta description: {draft.meta_description}
Slug: {draft.slug}
Sources: {", ".join(draft.sources_cited) or "(none listed)"}

Body:
{draft.body}

SEO REQUIREMENTS:
- Search intent: {seo.search_intent}
- SERP features to target: {", ".join(seo.serp_features)}
- Keyword variations to include: {", ".join(seo.keyword_variations)}

{link_context}

Tasks:
1. Title under 60 characters with the keyword near the front
2. Meta description under 155 characters that includes the keyword
3. Two to four internal links added to the body as markdown links, also listed in internal_links
4. Article schema markup (schema.org, datePublished {date.today().isoformat()})

Keep the slug "{draft.slug}" and return the full body."""

    def postprocess(
        self,
        value: FinalArticle,
        draft: ArticleDraft,
        seo: SEOResearch,
        catalog: Optional[List[CatalogEntry]] = None,
    ) -> FinalArticle:
        update: Dict[str, Any] = {}
        if value.slug != draft.slug:
            logger.warning(
                f"[{self.name}] Model changed slug '{draft.slug}' -> '{value.slug}', restoring"
            )
            update["slug"] = draft.slug
        if not value.sources and draft.sources_cited:
            update["sources"] = list(draft.sources_cited)
        return value.model_copy(update=update) if update else value

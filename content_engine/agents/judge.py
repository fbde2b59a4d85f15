"""Judge agent: scores drafts, picks a winner, optionally merges strengths"""

import logging
from typing import List, Optional

from ..models import (
    AgentResult,
    ArticleDraft,
    ElementToCombine,
    JudgeDecision,
    JudgeOutcome,
    SynthesizedBrief,
)
from .base import Agent

logger = logging.getLogger(__name__)


JUDGE_SYSTEM_PROMPT = """You are the editor-in-chief of a medical publication choosing which
draft to publish. Judge each draft on medical accuracy, how well it answers
the brief's questions, readability and search potential. Draft indices are
zero-based. If the winner would clearly improve by borrowing specific
elements from other drafts, set synthesis_opportunity and list them."""

SYNTHESIS_SYSTEM_PROMPT = """You are the editor-in-chief of a medical publication. You improve a
winning draft by folding in specific strengths from competing drafts while
keeping its voice, structure and medical accuracy intact."""


class JudgeAgent(Agent):
    """
    Ranks drafts and returns the selected one.

    Drafts without a body are dropped before scoring. An out-of-range winner
    index is clamped. When synthesis is recommended a second call merges the
    listed elements into the winner; if that call fails the original winner
    is kept. Token usage from both calls is summed.
    """

    name = "judge"
    system_prompt = JUDGE_SYSTEM_PROMPT
    response_model = JudgeDecision
    max_tokens = 4000
    synthesis_max_tokens = 8000

    def build_prompt(self, drafts: List[ArticleDraft], brief: SynthesizedBrief) -> str:
        limit = self.config.pipeline.judge_excerpt_chars
        sections = []
        for i, draft in enumerate(drafts):
            sections.append(
                f"DRAFT {i} ({draft.angle}):\n"
                f"Title: {draft.title}\n"
                f"{draft.body[:limit]}..."
            )
        joined = "\n\n".join(sections)

        return f"""Evaluate these {len(drafts)} article drafts and pick the best one.

BRIEF:
Primary angle: {brief.primary_angle}
Audience: {brief.target_audience}
Questions to answer: {", ".join(brief.key_questions)}
Must include: {", ".join(brief.must_include)}

{joined}

Return the zero-based index of the winner, a score with strengths and
weaknesses for every draft, and whether combining elements would help."""

    def build_synthesis_prompt(
        self,
        winner: ArticleDraft,
        drafts: List[ArticleDraft],
        elements: List[ElementToCombine],
    ) -> str:
        limit = self.config.pipeline.synthesis_excerpt_chars
        wanted = "\n".join(f"- From draft {e.from_draft}: {e.element}" for e in elements)
        others = "\n\n".join(
            f"DRAFT {i}:\n{draft.body[:limit]}..." for i, draft in enumerate(drafts)
        )

        return f"""Improve this article by working in the best elements of the other drafts.

BASE ARTICLE:
Angle: {winner.angle}
Title: {winner.title}
Meta description: {winner.meta_description}
Slug: {winner.slug}
Body:
{winner.body}

ELEMENTS TO INCORPORATE:
{wanted}

OTHER DRAFTS (excerpts):
{others}

Return the complete improved article. Keep the slug "{winner.slug}"."""

    @staticmethod
    def valid_drafts(drafts: List[Optional[ArticleDraft]]) -> List[ArticleDraft]:
        return [d for d in drafts if d is not None and d.body and d.body.strip()]

    async def run(
        self, drafts: List[Optional[ArticleDraft]], brief: SynthesizedBrief
    ) -> AgentResult[JudgeOutcome]:
        valid = self.valid_drafts(drafts)
        if not valid:
            logger.error(f"[{self.name}] No valid drafts to judge")
            return AgentResult.fail(f"{self.name}: no valid drafts to judge")

        if len(valid) < len(drafts):
            logger.warning(
                f"[{self.name}] Dropped {len(drafts) - len(valid)} empty draft(s)"
            )

        try:
            prompt = self.build_prompt(valid, brief)
        except Exception as e:
            logger.error(f"[{self.name}] Failed to build prompt: {e}")
            return AgentResult.fail(f"{self.name}: {e}")

        scoring = await self.call(prompt)
        if not scoring.success:
            return scoring

        decision: JudgeDecision = scoring.data
        tokens = scoring.tokens_used

        index = min(max(decision.winner, 0), len(valid) - 1)
        if index != decision.winner:
            logger.warning(
                f"[{self.name}] Winner index {decision.winner} out of range "
                f"for {len(valid)} drafts, using {index}"
            )
            decision = decision.model_copy(update={"winner": index})

        selected = valid[index]
        synthesized = False

        if decision.synthesis_opportunity and decision.elements_to_combine:
            logger.info(
                f"[{self.name}] Synthesizing {len(decision.elements_to_combine)} "
                f"element(s) into draft {index}"
            )
            merged = await self._synthesize(selected, valid, decision.elements_to_combine)
            tokens += merged.tokens_used
            if merged.success:
                selected = merged.data
                if selected.slug != valid[index].slug:
                    selected = selected.model_copy(update={"slug": valid[index].slug})
                synthesized = True
            else:
                logger.warning(
                    f"[{self.name}] Synthesis failed, keeping original winner: {merged.error}"
                )

        outcome = JudgeOutcome(
            selected_draft=selected, decision=decision, synthesized=synthesized
        )
        return AgentResult.ok(outcome, tokens, scoring.provider)

    async def _synthesize(
        self,
        winner: ArticleDraft,
        drafts: List[ArticleDraft],
        elements: List[ElementToCombine],
    ) -> AgentResult:
        label = f"{self.name}-synthesis"
        try:
            prompt = self.build_synthesis_prompt(winner, drafts, elements)
        except Exception as e:
            logger.error(f"[{label}] Failed to build prompt: {e}")
            return AgentResult.fail(f"{label}: {e}")

        return await self.call(
            prompt,
            response_model=ArticleDraft,
            max_tokens=self.synthesis_max_tokens,
            label=label,
            system_prompt=SYNTHESIS_SYSTEM_PROMPT,
        )

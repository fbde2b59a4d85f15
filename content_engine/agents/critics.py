"""Critic agents and the combined critique round

Two independent reviews of the current draft:

- MedicalCriticAgent: patient safety and factual accuracy
- EditorialCriticAgent: clarity, voice, structure, engagement, SEO

run_critique calls them one after the other and merges the outcome. A draft
is finished only when both approve.
"""

import logging

from ..models import ArticleDraft, CritiqueRound, EditorialCritique, MedicalCritique
from .base import Agent

logger = logging.getLogger(__name__)


MEDICAL_CRITIC_SYSTEM_PROMPT = """You are a physician reviewing patient-facing content before it is published.
Patient safety comes first, then accuracy, then completeness. Flag anything
that could mislead a patient or delay proper care:
- incorrect dosing
- missing serious side effects or contraindications
- benefits stated without evidence
- missing "talk to your healthcare provider" guidance where it is needed

Approve only when the article is safe and accurate. Each required fix must be
one concrete, actionable sentence."""

EDITORIAL_CRITIC_SYSTEM_PROMPT = """You are a senior editor for a healthcare publication.
You score clarity, voice, structure, engagement and SEO from 1 to 10 and give
specific feedback rather than general impressions. The target voice is a
knowledgeable physician talking to a patient: warm, clear and confident
without being intimidating.

Approve only when no dimension needs a mandatory fix. Each required fix must be
one concrete, actionable sentence."""


class MedicalCriticAgent(Agent):
    """Reviews a draft for medical accuracy and safety"""

    name = "medical-critic"
    system_prompt = MEDICAL_CRITIC_SYSTEM_PROMPT
    response_model = MedicalCritique
    max_tokens = 4000
    temperature = 0.3

    def build_prompt(self, draft: ArticleDraft) -> str:
        limit = self.config.pipeline.critic_excerpt_chars
        return f"""Review this article for medical accuracy.

TITLE: {draft.title}

BODY:
{draft.body[:limit]}

Count the medical claims and how many are accurate, flag problem claims with
severity low, medium or high, list missing disclaimers, score overall accuracy
from 1 to 10 and list the fixes required before publication."""


class EditorialCriticAgent(Agent):
    """Reviews a draft for editorial quality"""

    name = "editorial-critic"
    system_prompt = EDITORIAL_CRITIC_SYSTEM_PROMPT
    response_model = EditorialCritique
    max_tokens = 4000
    temperature = 0.3

    def build_prompt(self, draft: ArticleDraft) -> str:
        limit = self.config.pipeline.critic_excerpt_chars
        return f"""Review this article for editorial quality.

TITLE: {draft.title}
META: {draft.meta_description}

ARTICLE (first {limit} characters):
{draft.body[:limit]}

Score each dimension 1-10 with feedback and whether it must be fixed, give an
overall score, list required fixes and any specific line edits."""


async def run_critique(
    draft: ArticleDraft,
    medical_critic: MedicalCriticAgent,
    editorial_critic: EditorialCriticAgent,
) -> CritiqueRound:
    """
    Run both critics sequentially against one draft.

    A critic that fails counts as not approving and contributes no fixes;
    its reported token usage is still counted.

    Args:
        draft: Draft under review
        medical_critic: Medical accuracy critic
        editorial_critic: Editorial quality critic

    Returns:
        CritiqueRound with both critiques (None where a critic failed)
    """
    medical_result = await medical_critic.run(draft)
    if not medical_result.success:
        logger.warning(f"Medical critique failed, treating as not approved: {medical_result.error}")

    editorial_result = await editorial_critic.run(draft)
    if not editorial_result.success:
        logger.warning(f"Editorial critique failed, treating as not approved: {editorial_result.error}")

    critique = CritiqueRound(
        medical=medical_result.data if medical_result.success else None,
        editorial=editorial_result.data if editorial_result.success else None,
        tokens_used=medical_result.tokens_used + editorial_result.tokens_used,
    )

    logger.info(
        f"Critique round: medical={'approved' if critique.medical and critique.medical.approved else 'rejected'}, "
        f"editorial={'approved' if critique.editorial and critique.editorial.approved else 'rejected'}, "
        f"{len(critique.revision_needed)} fix(es)"
    )
    return critique

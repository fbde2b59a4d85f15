"""Writer and revision agents

Every writer persona shares one voice guide and one output shape
(ArticleDraft); only the angle differs. Which client a persona calls is
decided by configuration, so any persona can be pointed at a different
provider without touching this module.
"""

import logging
from typing import List, Optional

from ..config import Config
from ..models import ArticleDraft, SynthesizedBrief
from .base import Agent, StructuredInvoker

logger = logging.getLogger(__name__)


WRITER_BASE_SYSTEM_PROMPT = """You write medical content for a physician-led telehealth provider.

VOICE:
- Sound like a physician explaining things to a patient, not a brand marketing to a customer
- Be direct and clear; readers are often worried or confused
- Warm but authoritative
- Every sentence should inform or reassure
- Address the reader as "you"

MEDICAL ACCURACY:
- Be precise with drug names, doses and mechanisms
- Mention side effects for any medication you discuss
- Say "talk to your healthcare provider" where it is clinically appropriate
- Never overstate benefits or play down risks

FORMAT:
- Markdown, ## for sections and ### for subsections
- Short paragraphs of 2-4 sentences
- Bold the key takeaways"""

PERSONA_PROMPTS = {
    "clinical": """ANGLE: Clinical authority.
Lead with mechanisms and evidence and explain the reasoning behind each
recommendation. Written for readers who want to understand the science.""",
    "empathetic": """ANGLE: Patient-centered empathy.
Acknowledge the reader's worries before educating. Written for readers who
feel overwhelmed or unsure where to start.""",
    "practical": """ANGLE: Actionable guidance.
Focus on what to do next: clear steps, what to expect and when. Written for
readers ready to act who want a roadmap.""",
    "innovative": """ANGLE: Modern perspective.
Cover newer treatments, how care fits into daily life, and where the field
is heading. Written for early adopters who want more than standard advice.""",
}

REVISION_SYSTEM_PROMPT = f"""{WRITER_BASE_SYSTEM_PROMPT}

You are revising an existing article against reviewer feedback.
Change only what the feedback asks for and keep everything that works.
When feedback conflicts, medical accuracy wins over style."""


def _bullets(items: List[str]) -> str:
    return "\n".join(f"- {item}" for item in items) if items else "- (none)"


class WriterAgent(Agent):
    """Writes one full draft from the brief in a given persona"""

    response_model = ArticleDraft
    max_tokens = 8000

    def __init__(
        self,
        persona: str,
        client: StructuredInvoker,
        config: Optional[Config] = None,
    ):
        """
        Initialize writer.

        Args:
            persona: Key into PERSONA_PROMPTS
            client: Structured-output client or dispatcher
            config: Optional configuration object

        Raises:
            ValueError: If the persona is unknown
        """
        if persona not in PERSONA_PROMPTS:
            raise ValueError(
                f"Unknown writer persona '{persona}'. "
                f"Supported: {', '.join(PERSONA_PROMPTS)}"
            )
        super().__init__(client, config)
        self.persona = persona
        self.name = f"writer-{persona}"
        self.system_prompt = f"{WRITER_BASE_SYSTEM_PROMPT}\n\n{PERSONA_PROMPTS[persona]}"

    def build_prompt(self, topic: str, brief: SynthesizedBrief) -> str:
        return f"""Write an article for: "{topic}"

RESEARCH BRIEF:
{brief.model_dump_json(indent=2)}

REQUIREMENTS:
- angle: "{self.persona}"
- title: SEO-optimized, under 60 characters
- meta_description: compelling, under 155 characters
- slug: lowercase, hyphenated, URL-safe
- body: about {brief.word_count} words of markdown following the brief's structure
- Cite sources wherever you make a medical claim and list them in sources_cited
- Close with a helpful, low-pressure call to action"""

    def postprocess(self, value: ArticleDraft, topic: str, brief: SynthesizedBrief) -> ArticleDraft:
        if value.angle != self.persona:
            value = value.model_copy(update={"angle": self.persona})
        return value


class RevisionAgent(Agent):
    """Rewrites the current draft against combined critic feedback"""

    name = "revision"
    system_prompt = REVISION_SYSTEM_PROMPT
    response_model = ArticleDraft
    max_tokens = 8000

    def build_prompt(
        self,
        draft: ArticleDraft,
        medical_fixes: List[str],
        editorial_fixes: List[str],
    ) -> str:
        return f"""Revise this article based on reviewer feedback.

CURRENT ARTICLE:
Title: {draft.title}
Meta description: {draft.meta_description}
Slug: {draft.slug}
Body:
{draft.body}

MEDICAL ACCURACY ISSUES (must fix):
{_bullets(medical_fixes)}

EDITORIAL IMPROVEMENTS:
{_bullets(editorial_fixes)}

Return the complete revised article. Keep angle "{draft.angle}" and slug
"{draft.slug}" unchanged."""

    def postprocess(
        self,
        value: ArticleDraft,
        draft: ArticleDraft,
        medical_fixes: List[str],
        editorial_fixes: List[str],
    ) -> ArticleDraft:
        # Published links may already point at the slug
        update = {}
        if value.slug != draft.slug:
            logger.warning(
                f"[{self.name}] Model changed slug '{draft.slug}' -> '{value.slug}', restoring"
            )
            update["slug"] = draft.slug
        if value.angle != draft.angle:
            update["angle"] = draft.angle
        if not value.sources_cited and draft.sources_cited:
            update["sources_cited"] = list(draft.sources_cited)
        return value.model_copy(update=update) if update else value

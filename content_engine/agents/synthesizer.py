"""Synthesizer agent: merges the three research documents into one brief"""

import logging

from ..models import CompetitorResearch, MedicalResearch, SEOResearch, SynthesizedBrief
from .base import Agent

logger = logging.getLogger(__name__)


SYNTHESIZER_SYSTEM_PROMPT = """You are a content strategist. You turn SEO, medical and competitive
research into one brief that writers can execute without reading the raw
research. Balance ranking requirements, medical accuracy and differentiation.
Medical accuracy wins any conflict."""


class SynthesizerAgent(Agent):
    """Produces the single SynthesizedBrief every writer works from"""

    name = "synthesizer"
    system_prompt = SYNTHESIZER_SYSTEM_PROMPT
    response_model = SynthesizedBrief
    max_tokens = 4000

    def build_prompt(
        self,
        topic: str,
        seo: SEOResearch,
        medical: MedicalResearch,
        competitor: CompetitorResearch,
    ) -> str:
        return f"""Synthesize this research into a content strategy.

KEYWORD: "{topic}"

SEO RESEARCH:
{seo.model_dump_json(indent=2)}

MEDICAL RESEARCH:
{medical.model_dump_json(indent=2)}

COMPETITOR RESEARCH:
{competitor.model_dump_json(indent=2)}

Define the primary angle, the target audience, the questions the article must
answer, the elements it must include, how it differs from competitors, a
section-by-section outline and the target word count."""

"""Research agents

Three independent analyses of the target keyword, run concurrently by the
orchestrator:

- SEO: search intent, SERP features, ranking factors, target length
- Medical: facts, mechanisms, risks and the claims that need citations
- Competitor: what ranking content covers, misses and how to differ
"""

import logging

from ..models import CompetitorResearch, MedicalResearch, SEOResearch
from .base import Agent

logger = logging.getLogger(__name__)


SEO_SYSTEM_PROMPT = """You are an SEO strategist who specializes in healthcare publishing.
You know how search intent, SERP features and E-E-A-T signals (experience,
expertise, authoritativeness, trust) decide which medical pages rank.
Be concrete: name the features and factors that apply to this exact query."""

MEDICAL_SYSTEM_PROMPT = """You are a medical researcher with a background in pharmacology and
evidence-based medicine. Accuracy comes first. Separate established findings
from emerging research, and note which statements need a citation to a
regulatory label, guideline or clinical trial."""

COMPETITOR_SYSTEM_PROMPT = """You are a competitive content analyst for consumer health publishing.
You study what the top-ranking pages on a topic already say, where they are
thin, and which angle a physician-led telehealth provider could own."""


class SEOResearchAgent(Agent):
    """Analyzes search intent and ranking requirements for a keyword"""

    name = "seo-research"
    system_prompt = SEO_SYSTEM_PROMPT
    response_model = SEOResearch
    max_tokens = 2000

    def build_prompt(self, topic: str) -> str:
        return f"""Analyze the search landscape for the keyword: "{topic}"

Cover:
1. The real search intent (informational, transactional, comparison or navigational)
2. SERP features likely to appear (featured snippet, people also ask, ...)
3. The factors that will decide ranking for this query
4. Related keyword variations to work in naturally
5. The word count that typically ranks
6. The content format that fits best (guide, comparison, FAQ, how-to, ...)"""


class MedicalResearchAgent(Agent):
    """Collects the medical facts the article has to get right"""

    name = "medical-research"
    system_prompt = MEDICAL_SYSTEM_PROMPT
    response_model = MedicalResearch
    max_tokens = 3000

    def build_prompt(self, topic: str) -> str:
        return f"""Research the medical side of: "{topic}"

Provide:
1. Key facts that must be stated accurately
2. Mechanism of action, where a medication is involved
3. Contraindications and warnings
4. Common and serious side effects
5. Dosing and titration information, if relevant
6. Credible sources (regulatory labels, trials, guidelines) with type and year
7. Accuracy requirements: which claims need a citation or a hedge"""


class CompetitorResearchAgent(Agent):
    """Maps competing content and the gaps it leaves"""

    name = "competitor-research"
    system_prompt = COMPETITOR_SYSTEM_PROMPT
    response_model = CompetitorResearch
    max_tokens = 2500

    def build_prompt(self, topic: str) -> str:
        return f"""Analyze the content that currently ranks for: "{topic}"

Consider large health publishers and telehealth brands. For the likely top
articles give title, angle, strengths, weaknesses and rough word count.
Then list:
- content gaps none of them cover well
- unique angles a physician-led telehealth provider could own
- reader questions left unanswered"""

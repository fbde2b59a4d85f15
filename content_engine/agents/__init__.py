"""Pipeline agents

Each agent wraps one structured-output call and returns an AgentResult:

1. Research (SEO, medical, competitor): run concurrently on the keyword
2. SynthesizerAgent: merges research into one brief
3. WriterAgent: one draft per persona, run concurrently
4. JudgeAgent: picks the winning draft, optionally merging strengths
5. MedicalCriticAgent / EditorialCriticAgent: review the current draft
6. RevisionAgent: rewrites the draft against critic feedback
7. FinalizerAgent: SEO pass producing the publishable article
"""

from .base import Agent
from .critics import EditorialCriticAgent, MedicalCriticAgent, run_critique
from .finalizer import FinalizerAgent
from .judge import JudgeAgent
from .research import CompetitorResearchAgent, MedicalResearchAgent, SEOResearchAgent
from .synthesizer import SynthesizerAgent
from .writers import PERSONA_PROMPTS, RevisionAgent, WriterAgent

__all__ = [
    "Agent",
    "SEOResearchAgent",
    "MedicalResearchAgent",
    "CompetitorResearchAgent",
    "SynthesizerAgent",
    "WriterAgent",
    "RevisionAgent",
    "PERSONA_PROMPTS",
    "JudgeAgent",
    "MedicalCriticAgent",
    "EditorialCriticAgent",
    "run_critique",
    "FinalizerAgent",
]

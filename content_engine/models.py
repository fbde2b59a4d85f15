"""Data models for the content pipeline"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Generic, List, Optional, TypeVar
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

T = TypeVar("T")

MAX_FIX_LENGTH = 200
MAX_FIXES_PER_CRITIC = 8


class KeywordStatus(str, Enum):
    """Lifecycle of a keyword in the external queue"""
    QUEUED = "queued"
    GENERATING = "generating"
    PUBLISHED = "published"
    REVIEW = "review"
    ERROR = "error"


class PipelineStatus(str, Enum):
    """Orchestrator phases"""
    RESEARCHING = "researching"
    SYNTHESIZING = "synthesizing"
    DRAFTING = "drafting"
    JUDGING = "judging"
    CRITIQUING = "critiquing"
    REVISING = "revising"
    FINALIZING = "finalizing"
    COMPLETE = "complete"
    FAILED = "failed"


class Keyword(BaseModel):
    """A queued keyword to write about"""
    id: str
    text: str
    search_volume: Optional[int] = None
    difficulty: Optional[float] = None
    intent: Optional[str] = None
    cluster: Optional[str] = None
    priority: Optional[float] = None


# Research documents

class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class SEOResearch(_Frozen):
    """Search intent and ranking analysis"""
    search_intent: str
    serp_features: List[str] = Field(default_factory=list)
    top_ranking_factors: List[str] = Field(default_factory=list)
    keyword_variations: List[str] = Field(default_factory=list)
    recommended_word_count: int
    content_format: str


class MedicalSource(_Frozen):
    title: str
    type: str
    year: Optional[int] = None


class MedicalResearch(_Frozen):
    """Medical facts the article must get right"""
    key_facts: List[str]
    mechanisms: List[str] = Field(default_factory=list)
    contraindications: List[str] = Field(default_factory=list)
    side_effects: List[str] = Field(default_factory=list)
    dosing_info: List[str] = Field(default_factory=list)
    sources: List[MedicalSource] = Field(default_factory=list)
    accuracy_requirements: List[str] = Field(default_factory=list)


class CompetitorArticle(_Frozen):
    title: str
    angle: str
    strengths: List[str] = Field(default_factory=list)
    weaknesses: List[str] = Field(default_factory=list)
    word_count: Optional[int] = None


class CompetitorResearch(_Frozen):
    """What ranking competitors cover and miss"""
    top_articles: List[CompetitorArticle] = Field(default_factory=list)
    content_gaps: List[str]
    unique_angles: List[str] = Field(default_factory=list)
    questions_unanswered: List[str] = Field(default_factory=list)


class SynthesizedBrief(_Frozen):
    """Unified content strategy handed to every writer"""
    primary_angle: str
    target_audience: str
    key_questions: List[str]
    must_include: List[str]
    differentiation: str
    structure: List[str]
    word_count: int


# Drafts and judging

class ArticleDraft(_Frozen):
    """One candidate article. Revisions produce a new instance."""
    angle: str
    title: str
    meta_description: str
    slug: str
    body: str
    sources_cited: List[str] = Field(default_factory=list)


class DraftScore(BaseModel):
    draft_index: int
    overall: float
    strengths: List[str] = Field(default_factory=list)
    weaknesses: List[str] = Field(default_factory=list)


class ElementToCombine(BaseModel):
    from_draft: int
    element: str


class JudgeDecision(BaseModel):
    """Judge scoring of all drafts"""
    winner: int
    reasoning: str
    scores: List[DraftScore] = Field(default_factory=list)
    synthesis_opportunity: bool = False
    elements_to_combine: List[ElementToCombine] = Field(default_factory=list)


class JudgeOutcome(BaseModel):
    """Selected draft plus the decision that produced it"""
    selected_draft: ArticleDraft
    decision: JudgeDecision
    synthesized: bool = False


# Critiques

def _bound_fixes(fixes: List[str]) -> List[str]:
    return [fix[:MAX_FIX_LENGTH] for fix in fixes[:MAX_FIXES_PER_CRITIC]]


class FlaggedClaim(BaseModel):
    claim: str
    issue: str
    severity: str = "medium"


class MedicalCritique(BaseModel):
    """Domain-accuracy review of a draft"""
    claims_found: int
    claims_verified: int
    flagged_claims: List[FlaggedClaim] = Field(default_factory=list)
    missing_disclaimers: List[str] = Field(default_factory=list)
    overall_accuracy: float
    approved: bool
    revision_required: List[str] = Field(default_factory=list)

    @field_validator("revision_required")
    @classmethod
    def _bound_revisions(cls, fixes: List[str]) -> List[str]:
        return _bound_fixes(fixes)


class DimensionScore(BaseModel):
    dimension: str
    score: float
    feedback: str
    must_fix: bool = False


class EditorialScores(BaseModel):
    clarity: DimensionScore
    voice: DimensionScore
    structure: DimensionScore
    engagement: DimensionScore
    seo: DimensionScore


class SpecificEdit(BaseModel):
    location: str
    current: str
    suggested: str


class EditorialCritique(BaseModel):
    """Editorial-quality review of a draft"""
    scores: EditorialScores
    overall_score: float
    approved: bool
    revision_required: List[str] = Field(default_factory=list)
    specific_edits: List[SpecificEdit] = Field(default_factory=list)

    @field_validator("revision_required")
    @classmethod
    def _bound_revisions(cls, fixes: List[str]) -> List[str]:
        return _bound_fixes(fixes)


class CritiqueRound(BaseModel):
    """Combined outcome of both critics on one draft"""
    medical: Optional[MedicalCritique] = None
    editorial: Optional[EditorialCritique] = None
    tokens_used: int = 0

    @property
    def approved(self) -> bool:
        """Both critics must approve"""
        return bool(
            self.medical and self.medical.approved
            and self.editorial and self.editorial.approved
        )

    @property
    def medical_fixes(self) -> List[str]:
        return list(self.medical.revision_required) if self.medical else []

    @property
    def editorial_fixes(self) -> List[str]:
        return list(self.editorial.revision_required) if self.editorial else []

    @property
    def revision_needed(self) -> List[str]:
        """Concatenated fixes, duplicates kept"""
        return self.medical_fixes + self.editorial_fixes


# Final artifact

class InternalLink(BaseModel):
    anchor: str
    slug: str


class CatalogEntry(BaseModel):
    """Existing published content available for internal linking"""
    title: str
    slug: str


class FinalArticle(BaseModel):
    """Publishable article"""
    title: str
    meta_description: str
    slug: str
    body: str
    sources: List[str] = Field(default_factory=list)
    internal_links: List[InternalLink] = Field(default_factory=list)
    schema_markup: Optional[Dict[str, Any]] = None
    quality_score: float = 0.0
    iterations: int = 1
    total_tokens: int = 0
    degraded: bool = False


class AgentResult(BaseModel, Generic[T]):
    """Result-or-error returned by every agent"""
    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    tokens_used: int = 0
    provider: Optional[str] = None

    @classmethod
    def ok(cls, data: T, tokens_used: int = 0, provider: Optional[str] = None) -> "AgentResult[T]":
        return cls(success=True, data=data, tokens_used=tokens_used, provider=provider)

    @classmethod
    def fail(cls, error: str, tokens_used: int = 0) -> "AgentResult[T]":
        return cls(success=False, error=error, tokens_used=tokens_used)


class PipelineState(BaseModel):
    """Mutable aggregate for one keyword's run, owned by the orchestrator"""
    run_id: str = Field(default_factory=lambda: str(uuid4()))
    keyword: Keyword
    status: PipelineStatus = PipelineStatus.RESEARCHING
    revision_count: int = 0
    max_revisions: int = 3
    total_tokens: int = 0
    started_at: datetime = Field(default_factory=datetime.now)
    completed_at: Optional[datetime] = None
    errors: List[str] = Field(default_factory=list)
    log: List[str] = Field(default_factory=list)

    seo_research: Optional[SEOResearch] = None
    medical_research: Optional[MedicalResearch] = None
    competitor_research: Optional[CompetitorResearch] = None
    brief: Optional[SynthesizedBrief] = None
    drafts: List[ArticleDraft] = Field(default_factory=list)
    judge_decision: Optional[JudgeDecision] = None
    selected_draft: Optional[ArticleDraft] = None
    current_draft: Optional[ArticleDraft] = None
    draft_history: List[ArticleDraft] = Field(default_factory=list)
    medical_critique: Optional[MedicalCritique] = None
    editorial_critique: Optional[EditorialCritique] = None
    approved: bool = False
    final_article: Optional[FinalArticle] = None


class PipelineResult(BaseModel):
    """Structured outcome returned by the orchestrator"""
    success: bool
    article: Optional[FinalArticle] = None
    state: PipelineState


class ContentRecord(BaseModel):
    """Row written to the content record store"""
    keyword_id: Optional[str] = None
    title: str
    slug: str
    body: str
    meta_description: str
    quality_score: float
    iterations: int
    status: str
    external_content_id: str

"""Pydantic schemas for every structured generation result."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field

from launchpath.log import get_logger

logger = get_logger(__name__)


# -- niche analysis --------------------------------------------------------


class TargetSegment(BaseModel):
    description: str
    why: str


class RevenuePotential(BaseModel):
    per_client: str
    target_clients: int
    monthly_total: str


class SegmentScores(BaseModel):
    roi_from_service: int = Field(ge=0, le=25)
    can_afford_it: int = Field(ge=0, le=25)
    guarantee_results: int = Field(ge=0, le=25)
    easy_to_find: int = Field(ge=0, le=25)
    total: int = Field(ge=0, le=100)

    @property
    def component_sum(self) -> int:
        return self.roi_from_service + self.can_afford_it + self.guarantee_results + self.easy_to_find


class AIRecommendation(BaseModel):
    niche: str
    score: int = Field(ge=0, le=100)
    target_segment: TargetSegment
    bottleneck: str
    strategic_insight: str
    your_solution: str
    revenue_potential: RevenuePotential
    why_for_you: str
    ease_of_finding: str
    segment_scores: SegmentScores

    def reconciled(self) -> AIRecommendation:
        """Return a copy whose ``total`` and ``score`` equal the sub-score sum."""
        expected = self.segment_scores.component_sum
        if self.segment_scores.total == expected and self.score == expected:
            return self
        logger.warning(
            "score_sum_mismatch",
            niche=self.niche,
            score=self.score,
            total=self.segment_scores.total,
            component_sum=expected,
        )
        scores = self.segment_scores.model_copy(update={"total": expected})
        return self.model_copy(update={"score": expected, "segment_scores": scores})


class NicheAnalysisOutput(BaseModel):
    recommendations: list[AIRecommendation] = Field(min_length=1, max_length=3)
    reasoning: str


# -- offer -----------------------------------------------------------------


class OfferTransformation(BaseModel):
    transformation_from: str
    transformation_to: str
    system_description: str


GuaranteeType = Literal["time_bound", "outcome_based", "risk_reversal"]


class GuaranteeOutput(BaseModel):
    guarantee_text: str
    guarantee_type: GuaranteeType
    confidence_notes: str


class ComparableService(BaseModel):
    service: str
    price_range: str


class RevenueProjection(BaseModel):
    clients_needed: int
    monthly_revenue: str


class PricingOutput(BaseModel):
    pricing_setup: int = Field(ge=0)
    pricing_monthly: int = Field(ge=0)
    rationale: str
    comparable_services: list[ComparableService] = Field(default_factory=list)
    revenue_projection: RevenueProjection


ValidationStatus = Literal["passed", "needs_review", "failed"]


class AssembledOffer(BaseModel):
    segment: str
    transformation_from: str
    transformation_to: str
    system_description: str
    guarantee_text: str
    guarantee_type: GuaranteeType
    guarantee_confidence: str = ""
    pricing_setup: int
    pricing_monthly: int
    pricing_rationale: str = ""
    pricing_comparables: list[ComparableService] = Field(default_factory=list)
    revenue_projection: Optional[RevenueProjection] = None
    delivery_model: str = "build_once"
    validation_status: ValidationStatus = "passed"
    validation_notes: list[str] = Field(default_factory=list)


class OfferSectionUpdate(BaseModel):
    """Edits confirmed on the offer review cards. Numbers may arrive as strings."""

    segment: Optional[str] = None
    transformation_from: Optional[str] = None
    transformation_to: Optional[str] = None
    system_description: Optional[str] = None
    pricing_setup: Optional[int] = None
    pricing_monthly: Optional[int] = None
    guarantee_text: Optional[str] = None


# -- demo ------------------------------------------------------------------


class FormField(BaseModel):
    name: str
    label: str
    type: Literal["text", "email", "tel", "number", "select", "textarea"] = "text"
    placeholder: str = ""
    required: bool = True
    options: Optional[list[str]] = None


class DemoConfig(BaseModel):
    hero_headline: str
    hero_subheadline: str
    transformation_headline: str
    form_fields: list[FormField]
    scoring_prompt: str
    cta_button_text: str
    show_guarantee: bool = True
    guarantee_text: Optional[str] = None
    show_pricing: bool = False
    pricing_text: Optional[str] = None
    niche_slug: str
    validation_status: ValidationStatus = "passed"
    validation_notes: list[str] = Field(default_factory=list)


# -- utility ---------------------------------------------------------------


class FreeformInterpretation(BaseModel):
    field: str
    value: Optional[str] = None

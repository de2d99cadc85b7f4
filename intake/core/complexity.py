"""
Complexity tiers - canonical tiers, legacy aliases and tier recommendation

Responsibilities:
- Normalize caller-supplied tier labels to a canonical tier
- Detect risk factors in an answer set and recommend a tier
- Describe what each tier entails (question counts, sections, tags)

Design principles:
- Never fails on an unknown tier: any label outside the alias table falls
  back to the most restrictive tier
- Pure functions, no schema access (answered weight comes from TagSchema
  via the tag router)
"""

import logging
from dataclasses import dataclass
from typing import Optional

from intake.contracts import AnswerMap, TagSchema
from intake.utils.tag_router import calculate_answered_weight

logger = logging.getLogger(__name__)


# Ordered from most to least restrictive
CANONICAL_TIERS = ("base", "minimal", "standard", "comprehensive", "enterprise")

DEFAULT_TIER = "base"

# Legacy labels accepted by older CLIs and project data files
TIER_ALIASES = {
    "simple": "base",
    "startup": "minimal",
    "enterprise": "enterprise",
    "mcp-specific": "enterprise",
    "mcp": "enterprise",
}

# Score at which each tier becomes the recommendation
COMPLEXITY_THRESHOLDS = {
    "base": 4,
    "minimal": 10,
    "standard": 20,
    "comprehensive": 35,
    "enterprise": 48,
}

MIN_FIELD_COUNTS = {
    "base": 4,
    "minimal": 8,
    "standard": 15,
    "comprehensive": 25,
    "enterprise": 35,
}

LEVEL_DESCRIPTIONS = {
    "base": "Basic project with minimal requirements (~4 questions)",
    "minimal": "Simple project with standard requirements (~10 questions)",
    "standard": "Typical project with moderate complexity (~20 questions)",
    "comprehensive": "Complex project with extensive requirements (~35 questions)",
    "enterprise": "Enterprise-grade project with full compliance and scale (~48+ questions)",
}

_BASE_SECTIONS = ("foundation", "summary")

SECTIONS_BY_LEVEL = {
    "base": _BASE_SECTIONS,
    "minimal": _BASE_SECTIONS + ("architecture",),
    "standard": _BASE_SECTIONS + ("architecture", "operations", "security"),
    "comprehensive": _BASE_SECTIONS + (
        "architecture", "operations", "security", "privacy", "implementation",
    ),
    "enterprise": _BASE_SECTIONS + (
        "architecture", "operations", "security", "privacy", "implementation",
        "risks", "compliance",
    ),
}

TAGS_BY_LEVEL = {
    "base": ("foundation",),
    "minimal": ("foundation", "architecture"),
    "standard": ("foundation", "architecture", "operations"),
    "comprehensive": ("foundation", "architecture", "operations", "security", "privacy"),
    "enterprise": (
        "foundation", "architecture", "operations", "security", "privacy",
        "compliance", "risks",
    ),
}

REGULATED_INDUSTRIES = ("healthcare", "finance", "fintech", "banking", "insurance", "government")

# Points added to the base score per detected risk factor
RISK_WEIGHTS = {
    "handles_pii": 6,
    "handles_phi": 8,
    "requires_compliance": 8,
    "multi_region": 5,
    "handles_payments": 7,
    "high_availability": 5,
    "large_scale": 6,
    "multi_tenant": 5,
    "regulated_industry": 7,
}
INTEGRATION_WEIGHT = 2


# =============================================================================
# Tier normalization
# =============================================================================

def normalize_tier(tier: Optional[str]) -> str:
    """
    Map any tier label to a canonical tier.

    Rules:
    - Legacy alias -> its canonical tier (see TIER_ALIASES)
    - Anything else -> 'base', including canonical names that are not
      aliases ('minimal', 'standard', 'comprehensive'), None and wrong case

    Never raises.

    Examples:
        >>> normalize_tier('simple')
        'base'
        >>> normalize_tier('mcp')
        'enterprise'
        >>> normalize_tier('standard')
        'base'
        >>> normalize_tier('nonsense-tier')
        'base'
    """
    if isinstance(tier, str) and tier in TIER_ALIASES:
        return TIER_ALIASES[tier]

    logger.debug(f"Tier {tier!r} is not an alias, using '{DEFAULT_TIER}'")
    return DEFAULT_TIER


def tier_rank(tier: Optional[str]) -> int:
    """Position of the normalized tier in CANONICAL_TIERS (0 = most restrictive)."""
    return CANONICAL_TIERS.index(normalize_tier(tier))


# =============================================================================
# Risk detection and recommendation
# =============================================================================

@dataclass(frozen=True)
class RiskFactors:
    """Risk signals detected in an answer set."""
    handles_pii: bool = False
    handles_phi: bool = False
    requires_compliance: bool = False
    multi_region: bool = False
    handles_payments: bool = False
    high_availability: bool = False
    large_scale: bool = False
    multi_tenant: bool = False
    external_integrations: int = 0
    regulated_industry: bool = False


@dataclass(frozen=True)
class ComplexityAnalysis:
    recommended_level: str
    risk_factors: RiskFactors
    score: int
    question_count: int
    description: str


def detect_risk_factors(answers: AnswerMap) -> RiskFactors:
    """
    Detect risk factors from answers.

    Fields consulted: project.industry, privacy.pii, privacy.regulations,
    cloud.regions, operations.sla, architecture.scale, deployment.model,
    architecture.multitenancy. Missing or wrongly typed answers count as
    "not present".
    """
    industry = answers.get("project.industry")
    regulated_industry = isinstance(industry, str) and any(
        name in industry.lower() for name in REGULATED_INDUSTRIES
    )

    regulations = answers.get("privacy.regulations")
    if not isinstance(regulations, list):
        regulations = []

    regions = answers.get("cloud.regions")

    return RiskFactors(
        handles_pii=answers.get("privacy.pii") is True,
        handles_phi="hipaa" in regulations or "hitech" in regulations,
        requires_compliance=len(regulations) > 0 and "none" not in regulations,
        multi_region=isinstance(regions, list) and len(regions) > 1,
        handles_payments="pci-dss" in regulations,
        high_availability=answers.get("operations.sla") in ("99.99", "99.999"),
        large_scale=answers.get("architecture.scale") in ("large", "massive"),
        multi_tenant=(
            answers.get("deployment.model") == "hybrid"
            or answers.get("architecture.multitenancy") is True
        ),
        external_integrations=0,
        regulated_industry=regulated_industry,
    )


def calculate_complexity_score(risk_factors: RiskFactors) -> int:
    """Base score plus weighted points for each detected risk factor."""
    score = COMPLEXITY_THRESHOLDS["base"]

    for factor_name, weight in RISK_WEIGHTS.items():
        if getattr(risk_factors, factor_name):
            score += weight

    score += risk_factors.external_integrations * INTEGRATION_WEIGHT
    return score


def score_to_level(score: int) -> str:
    """Highest tier whose threshold the score reaches ('base' below minimal)."""
    for tier in reversed(CANONICAL_TIERS):
        if score >= COMPLEXITY_THRESHOLDS[tier]:
            return tier
    return DEFAULT_TIER


def recommend_level(answers: AnswerMap, tag_schema: Optional[TagSchema] = None) -> str:
    """
    Recommend a canonical tier for an answer set.

    With a tag schema, the weight of every answered field is added to the
    risk score before mapping it to a tier.
    """
    score = calculate_complexity_score(detect_risk_factors(answers))

    if tag_schema is not None:
        score += calculate_answered_weight(tag_schema, list(answers.keys()))

    return score_to_level(score)


def is_level_sufficient(
    tier: str,
    answers: AnswerMap,
    tag_schema: Optional[TagSchema] = None,
) -> bool:
    """True if tier is at least as broad as the recommended tier."""
    recommended = recommend_level(answers, tag_schema)
    return tier_rank(tier) >= CANONICAL_TIERS.index(recommended)


def question_count_for_level(tier: str) -> int:
    return COMPLEXITY_THRESHOLDS[normalize_tier(tier)]


def describe_level(tier: str) -> str:
    return LEVEL_DESCRIPTIONS[normalize_tier(tier)]


def min_field_count(tier: str) -> int:
    return MIN_FIELD_COUNTS[normalize_tier(tier)]


def meets_min_field_count(tier: str, answers: AnswerMap) -> bool:
    """True if enough answers carry a value (None and '' do not count)."""
    provided = sum(1 for value in answers.values() if value is not None and value != "")
    return provided >= min_field_count(tier)


def sections_for_level(tier: str) -> tuple:
    return SECTIONS_BY_LEVEL[normalize_tier(tier)]


def tags_for_level(tier: str) -> tuple:
    return TAGS_BY_LEVEL[normalize_tier(tier)]


def analyze_complexity(answers: AnswerMap, tag_schema: Optional[TagSchema] = None) -> ComplexityAnalysis:
    """Full complexity analysis: risk factors, raw score and recommendation."""
    risk_factors = detect_risk_factors(answers)
    recommended = recommend_level(answers, tag_schema)

    return ComplexityAnalysis(
        recommended_level=recommended,
        risk_factors=risk_factors,
        score=calculate_complexity_score(risk_factors),
        question_count=COMPLEXITY_THRESHOLDS[recommended],
        description=LEVEL_DESCRIPTIONS[recommended],
    )

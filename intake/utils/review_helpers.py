"""
Review Helpers - Convert collected answers to a human-readable review

Used by the hosts to show answers grouped by document section and a
per-stage completeness preview before validation.
"""

from typing import Any, Dict, List, Optional

from intake.contracts import AnswerMap, SchemaSnapshot
from intake.core.complexity import normalize_tier
from intake.core.requirements_validator import is_missing


# Field id prefix -> document section
SECTION_MAPPING = {
    "doc": {"stage": 1, "title": "Stage 1: Project Foundation", "subsection": "1.1 Document Information"},
    "project": {"stage": 1, "title": "Stage 1: Project Foundation", "subsection": "1.1 Document Information"},
    "summary": {"stage": 1, "title": "Stage 1: Project Foundation", "subsection": "1.2 Executive Summary"},
    "context": {"stage": 2, "title": "Stage 2: Requirements & Context Analysis", "subsection": "2.1 Business Context & Scope"},
    "constraints": {"stage": 2, "title": "Stage 2: Requirements & Context Analysis", "subsection": "2.2 Constraints & Assumptions"},
    "architecture": {"stage": 3, "title": "Stage 3: Architecture Design", "subsection": "3.1-3.4 Architecture Details"},
    "deployment": {"stage": 3, "title": "Stage 3: Architecture Design", "subsection": "3.5 Deployment Model"},
    "cloud": {"stage": 3, "title": "Stage 3: Architecture Design", "subsection": "3.5 Deployment Model"},
    "nfr": {"stage": 4, "title": "Stage 4: Non-Functional Requirements", "subsection": "NFRs"},
    "operations": {"stage": 4, "title": "Stage 4: Non-Functional Requirements", "subsection": "Service Levels"},
    "security": {"stage": 5, "title": "Stage 5: Security & Privacy Architecture", "subsection": "5.1 Security by Design"},
    "privacy": {"stage": 5, "title": "Stage 5: Security & Privacy Architecture", "subsection": "5.2 Privacy by Design"},
    "ops": {"stage": 6, "title": "Stage 6: Operations & Observability", "subsection": "Operations"},
    "implementation": {"stage": 7, "title": "Stage 7: Implementation Planning", "subsection": "Implementation"},
    "risks": {"stage": 8, "title": "Stage 8: Risk Management & Technical Debt", "subsection": "Risks"},
    "debt": {"stage": 8, "title": "Stage 8: Risk Management & Technical Debt", "subsection": "Technical Debt"},
    "appendices": {"stage": 9, "title": "Stage 9: Appendices & References", "subsection": "Appendices"},
}

OTHER_SECTION = {"stage": 0, "title": "Other", "subsection": "Miscellaneous"}

# Document stages and the fields each needs to be considered complete
DOCUMENT_STAGES = [
    {"stage": 1, "title": "Project Foundation",
     "required": ["doc.version", "project.name", "summary.problem", "summary.solution"]},
    {"stage": 2, "title": "Requirements & Context Analysis",
     "required": ["context.business_goals", "context.scope_in"]},
    {"stage": 3, "title": "Architecture Design",
     "required": ["architecture.style", "architecture.tech_stack"]},
    {"stage": 4, "title": "Non-Functional Requirements",
     "required": ["nfr.performance", "operations.sla"]},
    {"stage": 5, "title": "Security & Privacy Architecture",
     "required": ["security.auth", "security.data_classification"]},
    {"stage": 6, "title": "Operations & Observability",
     "required": ["ops.deployment_strategy"]},
    {"stage": 7, "title": "Implementation Planning",
     "required": ["implementation.methodology"]},
    {"stage": 8, "title": "Risk Management & Technical Debt",
     "required": ["risks.technical"]},
    {"stage": 9, "title": "Appendices & References",
     "required": []},
]

# Canonical tier -> document stages included
STAGES_BY_TIER = {
    "base": [1, 2],
    "minimal": [1, 2, 3],
    "standard": [1, 2, 3, 4, 5],
    "comprehensive": [1, 2, 3, 4, 5, 6, 7],
    "enterprise": [1, 2, 3, 4, 5, 6, 7, 8, 9],
}


def section_for_field(field_id: str) -> Dict[str, Any]:
    """Section info for a field id, by its prefix before the first dot."""
    prefix = field_id.split(".")[0]
    return SECTION_MAPPING.get(prefix, OTHER_SECTION)


def format_answer(value: Any) -> str:
    """
    Display string for an answer value.

    Examples:
        >>> format_answer(['gdpr', 'ccpa'])
        'gdpr, ccpa'
        >>> format_answer(True)
        'Yes'
    """
    if value is None:
        return "Not provided"
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, list):
        return ", ".join(str(v) for v in value)
    return str(value)


def group_answers_by_section(
    answers: AnswerMap,
    snapshot: Optional[SchemaSnapshot] = None,
) -> List[Dict[str, Any]]:
    """
    Group answers by document section, sorted by stage.

    Args:
        answers: Collected answers
        snapshot: Optional schema; question text is used when available

    Returns:
        list: [{"stage", "title", "answers": [{"field_id", "question",
               "answer", "display", "subsection"}]}]
    """
    grouped: Dict[str, Dict[str, Any]] = {}

    for field_id, answer in answers.items():
        section = section_for_field(field_id)
        key = f"{section['stage']}:{section['title']}"

        if key not in grouped:
            grouped[key] = {"stage": section["stage"], "title": section["title"], "answers": []}

        question = snapshot.get_question(field_id) if snapshot else None
        grouped[key]["answers"].append({
            "field_id": field_id,
            "question": question.prompt if question else field_id,
            "answer": answer,
            "display": format_answer(answer),
            "subsection": section["subsection"],
        })

    return sorted(grouped.values(), key=lambda s: s["stage"])


def build_document_preview(answers: AnswerMap, tier: Optional[str]) -> List[Dict[str, Any]]:
    """
    Per-stage completeness for the stages a tier's document includes.

    Status: "complete" at 100%, "partial" at 50% or more, else "minimal".
    Stages with no required fields are always complete.
    """
    included = STAGES_BY_TIER[normalize_tier(tier)]
    preview = []

    for stage in DOCUMENT_STAGES:
        if stage["stage"] not in included:
            continue

        total_required = len(stage["required"])
        answered = sum(1 for f in stage["required"] if not is_missing(answers.get(f)))
        completeness = round(answered / total_required * 100) if total_required else 100

        if completeness == 100:
            status = "complete"
        elif completeness >= 50:
            status = "partial"
        else:
            status = "minimal"

        preview.append({
            "stage": stage["stage"],
            "title": stage["title"],
            "completeness": completeness,
            "status": status,
            "answered": answered,
            "total_required": total_required,
        })

    return preview

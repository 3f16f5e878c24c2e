"""
Result normalization for raw provider output.

Turns whatever text the model returned into a well-formed, internally
consistent AnalysisResult. Nothing here raises: unparseable or partial
output degrades to documented defaults, biased towards MANUAL_REVIEW.

Normalization is idempotent. Feeding `result.model_dump_json(by_alias=True)`
back through `normalize` returns an equal result.
"""

import json
import logging
import math
import re
from typing import Any, Dict, List, Optional, Set, Tuple

from tampercheck.schemas.analysis import (
    AnalysisResult,
    ArtifactType,
    CloneMatch,
    DetailedFinding,
    GeometricConsistency,
    LightingVector,
    OverallAssessment,
    Region,
    Severity,
)

logger = logging.getLogger(__name__)

LOW_CONFIDENCE_REASON = "Low confidence due to image quality or ambiguous evidence"
MODERATE_CONFIDENCE_REASON = "Moderate confidence requires manual verification"

LOW_CONFIDENCE_THRESHOLD = 0.4
HIGH_CONFIDENCE_THRESHOLD = 0.7
MIN_HIGH_SEVERITY_FOR_TAMPERED = 2

DEFAULT_CONFIDENCE = 0.5
DEFAULT_IMAGE_QUALITY = 0.7
DEFAULT_EVIDENCE_STRENGTH = 0.5
DEFAULT_REGION_SIZE = 0.1
FALLBACK_PROMPT_VERSION = "v2.2"

DEFAULT_ANALYSIS_LOG = "Analysis completed with default values due to parsing issues."
DEFAULT_SUMMARY = "Analysis completed with limited confidence."
DEFAULT_TECHNICAL_SUMMARY = "Technical analysis results inconclusive."
DEFAULT_COVERAGE_NOTES = "Coverage analysis completed."
DEFAULT_FINDING = "Unspecified finding"
DEFAULT_LOCATION = "Unknown location"

_FENCE_OPEN_RE = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_FENCE_CLOSE_RE = re.compile(r"\s*```$")

_ASSESSMENTS = {a.value for a in OverallAssessment}
_SEVERITIES = {s.value for s in Severity}
_ARTIFACT_TYPES = {a.value for a in ArtifactType}
_GEOMETRY_TAGS = {g.value for g in GeometricConsistency}


# ---------------------------------------------------------------------------
# Scalar helpers
# ---------------------------------------------------------------------------


def _is_number(value: Any) -> bool:
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        # Integers too large for a float
        return False


def _enum_value(value: Any, allowed: Set[str]) -> Optional[str]:
    return value if isinstance(value, str) and value in allowed else None


def _clamp(value: Any, default: float, low: float = 0.0, high: float = 1.0) -> float:
    if not _is_number(value):
        return default
    return float(max(low, min(high, value)))


def _text(value: Any, default: str) -> str:
    if isinstance(value, str) and value:
        return value
    return default


def _strings(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str)]


def _mapping(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


# ---------------------------------------------------------------------------
# Consistency policy
# ---------------------------------------------------------------------------


def reconcile_assessment(
    confidence: float,
    assessment: Any,
    high_severity_count: int,
) -> Tuple[OverallAssessment, Optional[str]]:
    """
    Reconcile the model's verdict with its own confidence score.

    Returns the final assessment and the abstain reason to record, if any.
    Applying it to its own output is a no-op.
    """
    stated = _enum_value(assessment, _ASSESSMENTS)

    if confidence < LOW_CONFIDENCE_THRESHOLD:
        return OverallAssessment.MANUAL_REVIEW, LOW_CONFIDENCE_REASON

    if stated is None:
        return OverallAssessment.MANUAL_REVIEW, None

    verdict = OverallAssessment(stated)

    if confidence < HIGH_CONFIDENCE_THRESHOLD:
        if verdict == OverallAssessment.LIKELY_AUTHENTIC:
            return OverallAssessment.MANUAL_REVIEW, MODERATE_CONFIDENCE_REASON
        return verdict, None

    if (
        verdict == OverallAssessment.LIKELY_TAMPERED
        and high_severity_count < MIN_HIGH_SEVERITY_FOR_TAMPERED
    ):
        return OverallAssessment.SUSPICIOUS_ANOMALIES_DETECTED, None

    return verdict, None


# ---------------------------------------------------------------------------
# Field repair
# ---------------------------------------------------------------------------


def _region(value: Any) -> Region:
    data = _mapping(value)
    return Region(
        x=_clamp(data.get("x"), 0.0),
        y=_clamp(data.get("y"), 0.0),
        width=_clamp(data.get("width"), DEFAULT_REGION_SIZE),
        height=_clamp(data.get("height"), DEFAULT_REGION_SIZE),
    )


def _lighting_vector(value: Any) -> Optional[LightingVector]:
    if not isinstance(value, dict):
        return None
    return LightingVector(
        direction=_clamp(value.get("direction"), 0.0, high=360.0),
        softness=_clamp(value.get("softness"), 0.5),
    )


def _clone_matches(value: Any) -> List[CloneMatch]:
    if not isinstance(value, list):
        return []
    return [
        CloneMatch(
            region1=_region(item.get("region1")),
            region2=_region(item.get("region2")),
            similarity=_clamp(item.get("similarity"), 0.0),
        )
        for item in value
        if isinstance(item, dict)
    ]


def _finding(value: Any) -> DetailedFinding:
    data = _mapping(value)

    severity = _enum_value(data.get("severity"), _SEVERITIES)
    artifact_type = _enum_value(data.get("artifactType"), _ARTIFACT_TYPES)
    geometry = _enum_value(data.get("geometricConsistency"), _GEOMETRY_TAGS)

    return DetailedFinding(
        finding=_text(data.get("finding"), DEFAULT_FINDING),
        location=_text(data.get("location"), DEFAULT_LOCATION),
        severity=Severity(severity) if severity else Severity.Low,
        artifact_type=(
            ArtifactType(artifact_type) if artifact_type else ArtifactType.OTHER
        ),
        region=_region(data.get("region")),
        evidence_strength=_clamp(data.get("evidenceStrength"), DEFAULT_EVIDENCE_STRENGTH),
        benign_alternatives=_strings(data.get("benignAlternatives")),
        cross_checks=_strings(data.get("crossChecks")),
        geometric_consistency=(
            GeometricConsistency(geometry) if geometry else None
        ),
        lighting_vector=_lighting_vector(data.get("lightingVector")),
        resampling_indicators=_strings(data.get("resamplingIndicators")),
        clone_matches=_clone_matches(data.get("cloneMatches")),
    )


# ---------------------------------------------------------------------------
# Public entry points
# ---------------------------------------------------------------------------


def strip_code_fence(text: Optional[str]) -> str:
    """Remove a leading ```json / ``` marker and a trailing ``` marker."""
    if not text:
        return ""
    cleaned = text.strip()
    if cleaned.startswith("```"):
        cleaned = _FENCE_OPEN_RE.sub("", cleaned, count=1)
        cleaned = _FENCE_CLOSE_RE.sub("", cleaned)
    return cleaned


def normalize_payload(data: Any) -> AnalysisResult:
    """Repair an already-decoded payload. Non-object payloads become all defaults."""
    data = _mapping(data)

    confidence = _clamp(data.get("confidenceScore"), DEFAULT_CONFIDENCE)

    findings_raw = data.get("detailedFindings")
    findings = [_finding(f) for f in findings_raw] if isinstance(findings_raw, list) else []
    high_count = sum(1 for f in findings if f.severity == Severity.High)

    stated = data.get("overallAssessment")
    assessment, reason = reconcile_assessment(confidence, stated, high_count)
    if assessment.value != stated:
        logger.info(
            f"[NORMALIZE] Assessment {stated!r} -> {assessment.value} "
            f"(confidence={confidence:.2f}, high_findings={high_count})"
        )

    abstained = _strings(data.get("abstainedReasons"))
    if reason and reason not in abstained:
        abstained.append(reason)

    return AnalysisResult(
        analysis_log=_text(data.get("analysisLog"), DEFAULT_ANALYSIS_LOG),
        overall_assessment=assessment,
        confidence_score=confidence,
        summary=_text(data.get("summary"), DEFAULT_SUMMARY),
        technical_summary=_text(data.get("technicalSummary"), DEFAULT_TECHNICAL_SUMMARY),
        detailed_findings=findings,
        coverage_notes=_text(data.get("coverageNotes"), DEFAULT_COVERAGE_NOTES),
        image_quality_score=_clamp(data.get("imageQualityScore"), DEFAULT_IMAGE_QUALITY),
        abstained_reasons=abstained,
        prompt_version=_text(data.get("promptVersion"), FALLBACK_PROMPT_VERSION),
    )


def normalize(raw_text: Optional[str]) -> AnalysisResult:
    """Parse raw model text and return a normalized result. Never raises."""
    try:
        data = json.loads(strip_code_fence(raw_text))
    except (TypeError, ValueError, RecursionError) as e:
        preview = (raw_text or "")[:120]
        logger.warning(f"[NORMALIZE] Unparseable model output ({e}); using defaults. Preview: {preview!r}")
        data = {}

    if not isinstance(data, dict):
        logger.warning(f"[NORMALIZE] Model output is {type(data).__name__}, not an object; using defaults")

    return normalize_payload(data)

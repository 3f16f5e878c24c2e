"""
Pure unit tests for tampercheck/core/normalizer.py.

No I/O: raw model text in, AnalysisResult out.
"""

import copy
import json

import pytest

from tampercheck.core.normalizer import (
    DEFAULT_ANALYSIS_LOG,
    FALLBACK_PROMPT_VERSION,
    LOW_CONFIDENCE_REASON,
    MODERATE_CONFIDENCE_REASON,
    normalize,
    normalize_payload,
    reconcile_assessment,
    strip_code_fence,
)
from tampercheck.schemas.analysis import (
    ArtifactType,
    GeometricConsistency,
    OverallAssessment,
    Severity,
)
from tests.conftest import MODEL_OUTPUT


def _payload(**overrides) -> dict:
    data = copy.deepcopy(MODEL_OUTPUT)
    data.update(overrides)
    return data


def _high(n: int) -> list:
    return [dict(MODEL_OUTPUT["detailedFindings"][0]) for _ in range(n)]


# ---------------------------------------------------------------------------
# reconcile_assessment
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("assessment", [a.value for a in OverallAssessment])
def test_low_confidence_always_manual_review(assessment):
    verdict, reason = reconcile_assessment(0.39, assessment, 5)
    assert verdict == OverallAssessment.MANUAL_REVIEW
    assert reason == LOW_CONFIDENCE_REASON


def test_moderate_confidence_downgrades_authentic():
    verdict, reason = reconcile_assessment(0.5, "LIKELY_AUTHENTIC", 0)
    assert verdict == OverallAssessment.MANUAL_REVIEW
    assert reason == MODERATE_CONFIDENCE_REASON


def test_moderate_confidence_keeps_other_verdicts():
    verdict, reason = reconcile_assessment(0.6, "LIKELY_TAMPERED", 0)
    assert verdict == OverallAssessment.LIKELY_TAMPERED
    assert reason is None


def test_boundary_0_4_is_moderate_band():
    verdict, _ = reconcile_assessment(0.4, "SUSPICIOUS_ANOMALIES_DETECTED", 0)
    assert verdict == OverallAssessment.SUSPICIOUS_ANOMALIES_DETECTED


def test_tampered_needs_two_high_findings():
    verdict, reason = reconcile_assessment(0.75, "LIKELY_TAMPERED", 1)
    assert verdict == OverallAssessment.SUSPICIOUS_ANOMALIES_DETECTED
    assert reason is None

    verdict, _ = reconcile_assessment(0.75, "LIKELY_TAMPERED", 2)
    assert verdict == OverallAssessment.LIKELY_TAMPERED


def test_high_confidence_authentic_kept():
    verdict, reason = reconcile_assessment(0.7, "LIKELY_AUTHENTIC", 0)
    assert verdict == OverallAssessment.LIKELY_AUTHENTIC
    assert reason is None


@pytest.mark.parametrize("bogus", ["PROBABLY_FINE", None, 3, ""])
def test_unknown_assessment_becomes_manual_review(bogus):
    verdict, _ = reconcile_assessment(0.9, bogus, 0)
    assert verdict == OverallAssessment.MANUAL_REVIEW


# ---------------------------------------------------------------------------
# strip_code_fence
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "raw",
    ['```json\n{"a": 1}\n```', '```\n{"a": 1}\n```', '  {"a": 1}  ', '```JSON {"a": 1}```'],
)
def test_strip_code_fence(raw):
    assert strip_code_fence(raw) == '{"a": 1}'


def test_strip_code_fence_empty():
    assert strip_code_fence("") == ""
    assert strip_code_fence(None) == ""


# ---------------------------------------------------------------------------
# normalize: whole-result behaviour
# ---------------------------------------------------------------------------


def test_well_formed_output_passes_through():
    result = normalize(json.dumps(MODEL_OUTPUT))

    assert result.overall_assessment == OverallAssessment.SUSPICIOUS_ANOMALIES_DETECTED
    assert result.confidence_score == 0.72
    assert result.prompt_version == "v2.3"
    assert result.abstained_reasons == []
    finding = result.detailed_findings[0]
    assert finding.severity == Severity.High
    assert finding.artifact_type == ArtifactType.KERNING
    assert finding.geometric_consistency == GeometricConsistency.aligned


def test_fenced_output_is_parsed():
    result = normalize("```json\n" + json.dumps(MODEL_OUTPUT) + "\n```")
    assert result.summary == MODEL_OUTPUT["summary"]


def test_unparseable_output_yields_defaults():
    result = normalize("not json")

    assert result.confidence_score == 0.5
    assert result.overall_assessment == OverallAssessment.MANUAL_REVIEW
    assert result.analysis_log == DEFAULT_ANALYSIS_LOG
    assert result.image_quality_score == 0.7
    assert result.prompt_version == FALLBACK_PROMPT_VERSION
    assert result.detailed_findings == []


@pytest.mark.parametrize("raw", ["", "[1, 2, 3]", "42", "null"])
def test_non_object_output_yields_defaults(raw):
    result = normalize(raw)
    assert result.overall_assessment == OverallAssessment.MANUAL_REVIEW
    assert result.confidence_score == 0.5


def test_low_confidence_appends_reason():
    result = normalize(json.dumps(_payload(confidenceScore=0.2, overallAssessment="LIKELY_AUTHENTIC")))

    assert result.overall_assessment == OverallAssessment.MANUAL_REVIEW
    assert result.abstained_reasons == [LOW_CONFIDENCE_REASON]


def test_reason_not_duplicated():
    payload = _payload(
        confidenceScore=0.55,
        overallAssessment="LIKELY_AUTHENTIC",
        abstainedReasons=[MODERATE_CONFIDENCE_REASON],
    )
    result = normalize_payload(payload)
    assert result.abstained_reasons.count(MODERATE_CONFIDENCE_REASON) == 1


def test_tampered_with_single_high_finding_downgraded():
    payload = _payload(confidenceScore=0.75, overallAssessment="LIKELY_TAMPERED")
    result = normalize_payload(payload)
    assert result.overall_assessment == OverallAssessment.SUSPICIOUS_ANOMALIES_DETECTED


def test_tampered_with_two_high_findings_kept():
    payload = _payload(
        confidenceScore=0.9,
        overallAssessment="LIKELY_TAMPERED",
        detailedFindings=_high(2),
    )
    result = normalize_payload(payload)
    assert result.overall_assessment == OverallAssessment.LIKELY_TAMPERED
    assert result.high_severity_count == 2


@pytest.mark.parametrize("value, expected", [(1.7, 1.0), (-3, 0.0), ("0.9", 0.5), (True, 0.5)])
def test_confidence_is_clamped_or_defaulted(value, expected):
    result = normalize_payload(_payload(confidenceScore=value))
    assert result.confidence_score == expected


def test_empty_strings_fall_back_to_defaults():
    result = normalize_payload(_payload(summary="", analysisLog=None))
    assert result.summary == "Analysis completed with limited confidence."
    assert result.analysis_log == DEFAULT_ANALYSIS_LOG


# ---------------------------------------------------------------------------
# normalize: finding repair
# ---------------------------------------------------------------------------


def test_garbage_finding_is_repaired():
    payload = _payload(
        detailedFindings=[
            {
                "severity": "Critical",
                "artifactType": "DEEPFAKE",
                "region": {"x": 2, "y": -1, "width": "wide"},
                "evidenceStrength": 9,
                "benignAlternatives": "scanner noise",
                "crossChecks": ["ok", 3, None],
                "geometricConsistency": "tilted",
                "lightingVector": {"direction": 400, "softness": -0.5},
                "cloneMatches": [
                    {"region1": {"x": 0.1}, "similarity": 1.4},
                    "not a match",
                ],
            },
            "not a finding",
        ]
    )
    result = normalize_payload(payload)

    first, second = result.detailed_findings
    assert first.finding == "Unspecified finding"
    assert first.location == "Unknown location"
    assert first.severity == Severity.Low
    assert first.artifact_type == ArtifactType.OTHER
    assert (first.region.x, first.region.y) == (1.0, 0.0)
    assert (first.region.width, first.region.height) == (0.1, 0.1)
    assert first.evidence_strength == 1.0
    assert first.benign_alternatives == []
    assert first.cross_checks == ["ok"]
    assert first.geometric_consistency is None
    assert first.lighting_vector.direction == 360.0
    assert first.lighting_vector.softness == 0.0
    assert len(first.clone_matches) == 1
    assert first.clone_matches[0].similarity == 1.0
    assert first.clone_matches[0].region2.width == 0.1

    assert second.finding == "Unspecified finding"
    assert second.evidence_strength == 0.5


def test_clone_similarity_defaults_to_zero():
    finding = dict(MODEL_OUTPUT["detailedFindings"][0], cloneMatches=[{"region1": {}, "region2": {}}])
    result = normalize_payload(_payload(detailedFindings=[finding]))
    assert result.detailed_findings[0].clone_matches[0].similarity == 0.0


def test_missing_lighting_vector_is_null():
    finding = dict(MODEL_OUTPUT["detailedFindings"][0], lightingVector="from the left")
    result = normalize_payload(_payload(detailedFindings=[finding]))
    assert result.detailed_findings[0].lighting_vector is None


# ---------------------------------------------------------------------------
# normalize: hostile but valid JSON
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("value", [["LIKELY_TAMPERED"], {"verdict": "LIKELY_TAMPERED"}])
def test_non_string_assessment_becomes_manual_review(value):
    result = normalize(json.dumps(_payload(confidenceScore=0.9, overallAssessment=value)))
    assert result.overall_assessment == OverallAssessment.MANUAL_REVIEW


@pytest.mark.parametrize(
    "field, value",
    [
        ("severity", ["High"]),
        ("severity", {"level": "High"}),
        ("artifactType", {"type": "KERNING"}),
        ("artifactType", ["KERNING"]),
        ("geometricConsistency", []),
        ("geometricConsistency", {"tag": "aligned"}),
    ],
)
def test_non_string_finding_tags_fall_back(field, value):
    finding = dict(MODEL_OUTPUT["detailedFindings"][0], **{field: value})
    result = normalize(json.dumps(_payload(detailedFindings=[finding])))

    repaired = result.detailed_findings[0]
    if field == "severity":
        assert repaired.severity == Severity.Low
    elif field == "artifactType":
        assert repaired.artifact_type == ArtifactType.OTHER
    else:
        assert repaired.geometric_consistency is None


def test_huge_integer_confidence_takes_default():
    result = normalize('{"confidenceScore": 1' + "0" * 400 + "}")
    assert result.confidence_score == 0.5
    assert result.overall_assessment == OverallAssessment.MANUAL_REVIEW


def test_huge_integer_in_finding_takes_default():
    raw = '{"detailedFindings": [{"evidenceStrength": 1' + "0" * 400 + "}]}"
    assert normalize(raw).detailed_findings[0].evidence_strength == 0.5


def test_deeply_nested_output_yields_defaults():
    result = normalize("[" * 100000 + "]" * 100000)
    assert result.overall_assessment == OverallAssessment.MANUAL_REVIEW
    assert result.analysis_log == DEFAULT_ANALYSIS_LOG


# ---------------------------------------------------------------------------
# Idempotence
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "raw",
    [
        json.dumps(MODEL_OUTPUT),
        json.dumps(_payload(confidenceScore=0.2)),
        json.dumps(_payload(confidenceScore=0.5, overallAssessment="LIKELY_AUTHENTIC")),
        json.dumps(_payload(confidenceScore=0.8, overallAssessment="LIKELY_TAMPERED")),
        json.dumps(_payload(detailedFindings=[{"lightingVector": {"direction": 90}}])),
        "not json",
    ],
)
def test_normalize_is_idempotent(raw):
    first = normalize(raw)
    second = normalize(first.model_dump_json(by_alias=True))
    assert second == first

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class OverallAssessment(str, Enum):
    LIKELY_AUTHENTIC = "LIKELY_AUTHENTIC"
    SUSPICIOUS_ANOMALIES_DETECTED = "SUSPICIOUS_ANOMALIES_DETECTED"
    LIKELY_TAMPERED = "LIKELY_TAMPERED"
    MANUAL_REVIEW = "MANUAL_REVIEW"


class Severity(str, Enum):
    Low = "Low"
    Medium = "Medium"
    High = "High"


class ArtifactType(str, Enum):
    COMPRESSION = "COMPRESSION"
    CLONING = "CLONING"
    HALOING = "HALOING"
    NOISE_MISMATCH = "NOISE_MISMATCH"
    KERNING = "KERNING"
    RESAMPLING = "RESAMPLING"
    LIGHTING = "LIGHTING"
    PAPER_TEXTURE = "PAPER_TEXTURE"
    STAMP_SEAL = "STAMP_SEAL"
    SIGNATURE = "SIGNATURE"
    ALIGNMENT = "ALIGNMENT"
    FABRICATED_CONTENT = "FABRICATED_CONTENT"
    OTHER = "OTHER"


class GeometricConsistency(str, Enum):
    aligned = "aligned"
    skewed = "skewed"
    warped = "warped"


class _ReportModel(BaseModel):
    """camelCase on the wire (matches the prompt schema), snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class Region(_ReportModel):
    """Bounding box as fractions (0–1) of the image size."""
    x: float = Field(0.0, ge=0, le=1)
    y: float = Field(0.0, ge=0, le=1)
    width: float = Field(0.1, ge=0, le=1)
    height: float = Field(0.1, ge=0, le=1)


class LightingVector(_ReportModel):
    direction: float = Field(0.0, ge=0, le=360, description="Light direction in degrees")
    softness: float = Field(0.5, ge=0, le=1, description="Shadow softness")


class CloneMatch(_ReportModel):
    region1: Region
    region2: Region
    similarity: float = Field(0.0, ge=0, le=1)


class DetailedFinding(_ReportModel):
    finding: str
    location: str
    severity: Severity
    artifact_type: ArtifactType
    region: Region
    evidence_strength: float = Field(..., ge=0, le=1)
    benign_alternatives: List[str] = Field(default_factory=list)
    cross_checks: List[str] = Field(default_factory=list)
    geometric_consistency: Optional[GeometricConsistency] = None
    lighting_vector: Optional[LightingVector] = None
    resampling_indicators: List[str] = Field(default_factory=list)
    clone_matches: List[CloneMatch] = Field(default_factory=list)


class AnalysisResult(_ReportModel):
    """
    Normalized forensic report.

    Built once per analysis from raw provider output by
    `tampercheck.core.normalizer` and never mutated afterwards.
    """

    analysis_log: str
    overall_assessment: OverallAssessment
    confidence_score: float = Field(..., ge=0, le=1)
    summary: str
    technical_summary: str
    detailed_findings: List[DetailedFinding] = Field(default_factory=list)
    coverage_notes: str
    image_quality_score: float = Field(..., ge=0, le=1)
    abstained_reasons: List[str] = Field(default_factory=list)
    prompt_version: str

    @property
    def high_severity_count(self) -> int:
        return sum(1 for f in self.detailed_findings if f.severity == Severity.High)

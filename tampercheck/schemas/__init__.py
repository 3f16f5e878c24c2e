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
from tampercheck.schemas.credentials import CredentialStatus, StoreCredentialRequest
from tampercheck.schemas.options import AnalyzeConfig, ApiKeys, Provider
from tampercheck.schemas.parameters import (
    Endpoint,
    ExtendedContextParameters,
    GenerationParameters,
    ModelFamily,
    ReasoningParameters,
    StandardParameters,
)

__all__ = [
    "AnalysisResult",
    "ArtifactType",
    "CloneMatch",
    "DetailedFinding",
    "GeometricConsistency",
    "LightingVector",
    "OverallAssessment",
    "Region",
    "Severity",
    "CredentialStatus",
    "StoreCredentialRequest",
    "AnalyzeConfig",
    "ApiKeys",
    "Provider",
    "Endpoint",
    "ExtendedContextParameters",
    "GenerationParameters",
    "ModelFamily",
    "ReasoningParameters",
    "StandardParameters",
]

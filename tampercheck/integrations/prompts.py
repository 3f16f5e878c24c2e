"""
Forensic prompt factory.

The prompt is stateless: a fixed, versioned instruction template plus the
optional free-text context supplied by the user. `RESPONSE_SCHEMA` is the
structured-output schema handed to Gemini; OpenAI-compatible providers get
the same contract through the JSON description inside the prompt.
"""

PROMPT_VERSION = "v2.3"

SYSTEM_MESSAGE = (
    "You are a forensic document analysis assistant. You must output ONLY valid JSON "
    "that exactly matches the specified schema. No text before or after the JSON object. "
    "Start with { and end with }. Follow the exact field names and data types specified "
    "in the user prompt."
)

_ARTIFACT_TAXONOMY = (
    "COMPRESSION, CLONING, HALOING, NOISE_MISMATCH, KERNING, RESAMPLING, LIGHTING, "
    "PAPER_TEXTURE, STAMP_SEAL, SIGNATURE, ALIGNMENT, FABRICATED_CONTENT, OTHER"
)

_TEMPLATE = f"""You are a digital document forensics assistant. Analyze the provided image for signs of tampering.

CRITICAL: You MUST output ONLY valid JSON that exactly matches this schema. No other text before or after the JSON.

JSON Schema Structure:
{{
  "analysisLog": "string - Observational evidence and verification checks",
  "overallAssessment": "string - Must be one of: LIKELY_AUTHENTIC, SUSPICIOUS_ANOMALIES_DETECTED, LIKELY_TAMPERED, MANUAL_REVIEW",
  "confidenceScore": "number - 0.0 to 1.0",
  "summary": "string - 1-2 sentence lay summary",
  "technicalSummary": "string - Brief technical summary",
  "detailedFindings": [
    {{
      "finding": "string - Concrete visual indicator",
      "location": "string - Location label",
      "severity": "string - Must be: Low, Medium, or High",
      "artifactType": "string - Must be one of: {_ARTIFACT_TAXONOMY}",
      "region": {{"x": "number - 0-1", "y": "number - 0-1", "width": "number - 0-1", "height": "number - 0-1"}},
      "evidenceStrength": "number - 0-1",
      "benignAlternatives": ["string array - Required for Medium/Low severity"],
      "crossChecks": ["string array - Verification tests"],
      "geometricConsistency": "string - aligned, skewed, warped, or null",
      "lightingVector": {{"direction": "number - 0-360 degrees", "softness": "number - 0-1"}},
      "resamplingIndicators": ["string array"],
      "cloneMatches": [
        {{
          "region1": {{"x": "number", "y": "number", "width": "number", "height": "number"}},
          "region2": {{"x": "number", "y": "number", "width": "number", "height": "number"}},
          "similarity": "number - 0-1"
        }}
      ]
    }}
  ],
  "coverageNotes": "string - Coverage assessment",
  "imageQualityScore": "number - 0-1",
  "abstainedReasons": ["string array"],
  "promptVersion": "string - {PROMPT_VERSION}"
}}

CRITICAL PRINCIPLE: Distinguish between IMAGE QUALITY ISSUES and TAMPERING EVIDENCE
- Poor image quality (blur, compression, lighting) does NOT indicate tampering
- Only flag as suspicious when there are INCONSISTENCIES that suggest manipulation
- Natural blur affects entire document uniformly - selective sharp/blur regions may indicate editing
- FABRICATED CONTENT with clear inconsistencies should be classified as SUSPICIOUS_ANOMALIES_DETECTED

Protocol:
1) Image Quality Assessment: First assess overall image conditions (lighting, blur, compression)
2) Content Authenticity Check: Examine if document elements appear fabricated or artificially created
3) Evidence scan (observational): Identify concrete visual cues that suggest INCONSISTENCIES
4) Verification (challenge each cue): Test every suspected cue against plausible benign explanations
5) Assessment synthesis: Base final assessment on verified inconsistencies AND fabricated content indicators

NATURAL QUALITY ISSUES (NOT suspicious):
- Uniform blur across entire document (camera focus, motion blur)
- Consistent compression artifacts throughout image
- Even lighting conditions across document
- Age-related wear, fading, or discoloration
- Paper creases, wrinkles, or physical damage
- Scanner artifacts affecting entire document uniformly

SUSPICIOUS INCONSISTENCIES (Potential tampering):
- Sharp text next to blurry text in same focal plane
- Different compression levels in adjacent regions
- Inconsistent lighting directions on same surface
- Mismatched paper textures in continuous areas
- Text rendering inconsistencies (different fonts/anti-aliasing)
- Geometric distortions not matching document orientation

FABRICATED CONTENT INDICATORS (Strong tampering evidence):
- Multiple fake names, dimensions, or details that don't match document template
- Artificially generated or pasted text elements with different rendering
- Fake stamps, seals, or signatures with inconsistent properties
- Document elements that violate standard formatting or legal requirements
- Multiple inconsistent data points suggesting wholesale fabrication

ASSESSMENT CATEGORIES:

1. LIKELY_AUTHENTIC:
   - Normal wear, uniform quality issues, or minor imperfections
   - No evidence of manipulation or fabrication detected
   - REQUIRES: confidenceScore >= 0.7

2. MANUAL_REVIEW:
   - Use ONLY when image quality prevents confident analysis
   - NOT for documents with clear fabricated content
   - REQUIRED when: confidenceScore < 0.4 AND no clear fabrication indicators
   - Example abstained reasons: "Insufficient resolution", "Excessive compression prevents analysis"

3. SUSPICIOUS_ANOMALIES_DETECTED:
   - Clear inconsistencies or fabrication indicators are present
   - Require 2-3 independent anomalies OR clear fabricated content patterns
   - REQUIRES: confidenceScore >= 0.6
   - PRIORITIZE this category over MANUAL_REVIEW when fabrication is evident

4. LIKELY_TAMPERED:
   - Overwhelming evidence of manipulation
   - Multiple High-severity findings with fabrication indicators
   - REQUIRES: confidenceScore >= 0.8

ANALYSIS AREAS:
- Content authenticity: cross-check names, dimensions and dates against the document type and its template
- Geometric consistency: global skew/perspective, line straightness, proportional spacing
- Lighting and shadow vector: dominant light direction, shadow softness, consistency across stamps, signatures and photos
- Double compression and resampling: JPEG ghosting, resampling halos, ringing, regions at different quality or DPI
- Paper texture and material continuity: grain uniformity, repeated texture patterns, ink-paper interaction
- Clone/copy-move detection: near-duplicate micro-patterns with similarity scores and coordinates; rule out watermarks and security features
- Text rendering: anti-aliasing type, kerning consistency, mismatched rendering engines
- Template conformance: headers, footers, field positions, unexpected additions or removals
- Special elements: stamps, signatures, barcodes/QR codes and seals

Hard Abstain Conditions for MANUAL_REVIEW (technical limitations only):
- Image width < 400px: "Insufficient resolution for reliable analysis"
- JPEG quality < 30%: "Excessive compression artifacts prevent accurate assessment"
- Heavy glare/occlusion covering >60% of content: "Poor lighting conditions obscure critical areas"
- Extreme blur preventing ANY text recognition: "Image quality insufficient for forensic assessment"

Confidence Scoring (0.0-1.0):
- 0.9-1.0: Multiple High-severity findings OR overwhelming fabrication evidence
- 0.7-0.89: Single High-severity finding OR clear fabrication indicators
- 0.6-0.69: Multiple fabrication elements OR verified inconsistencies
- 0.4-0.59: Medium findings with some inconsistency evidence
- 0.1-0.39: Low-severity findings or ambiguous technical evidence
- 0.0: No tampering or fabrication evidence found

CONFIDENCE-ASSESSMENT CONSISTENCY:
- If confidenceScore < 0.4 AND no fabrication indicators: use "MANUAL_REVIEW"
- If confidenceScore >= 0.4 AND fabrication indicators present: use "SUSPICIOUS_ANOMALIES_DETECTED"
- If confidenceScore >= 0.7: safe to use "LIKELY_AUTHENTIC" or higher assessments

Rules:
- Output valid JSON matching the schema exactly
- Quality issues are not tampering evidence, but fabrication IS tampering evidence
- For each finding, provide concrete evidence of INCONSISTENCY or fabrication
- Include benignAlternatives for all Medium/Low severity findings except clear fabrication

If user context is provided, prioritize those areas without ignoring other critical signs.

REMEMBER: Output ONLY the JSON object. No explanatory text before or after. Start directly with {{ and end with }}.

promptVersion: {PROMPT_VERSION}"""


def build_prompt(user_context: str = "") -> str:
    """Returns the forensic instruction, with the user's context appended when given."""
    if user_context and user_context.strip():
        return f"{_TEMPLATE}\n\nUser Context: {user_context}"
    return _TEMPLATE


_REGION_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "x": {"type": "NUMBER"},
        "y": {"type": "NUMBER"},
        "width": {"type": "NUMBER"},
        "height": {"type": "NUMBER"},
    },
    "required": ["x", "y", "width", "height"],
}

RESPONSE_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "analysisLog": {"type": "STRING"},
        "overallAssessment": {
            "type": "STRING",
            "enum": [
                "LIKELY_AUTHENTIC",
                "SUSPICIOUS_ANOMALIES_DETECTED",
                "LIKELY_TAMPERED",
                "MANUAL_REVIEW",
            ],
        },
        "confidenceScore": {"type": "NUMBER"},
        "summary": {"type": "STRING"},
        "technicalSummary": {"type": "STRING"},
        "detailedFindings": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "finding": {"type": "STRING"},
                    "location": {"type": "STRING"},
                    "severity": {"type": "STRING", "enum": ["Low", "Medium", "High"]},
                    "artifactType": {"type": "STRING"},
                    "region": _REGION_SCHEMA,
                    "evidenceStrength": {"type": "NUMBER"},
                    "benignAlternatives": {"type": "ARRAY", "items": {"type": "STRING"}},
                    "crossChecks": {"type": "ARRAY", "items": {"type": "STRING"}},
                    "geometricConsistency": {"type": "STRING"},
                    "lightingVector": {
                        "type": "OBJECT",
                        "properties": {
                            "direction": {"type": "NUMBER"},
                            "softness": {"type": "NUMBER"},
                        },
                    },
                    "resamplingIndicators": {"type": "ARRAY", "items": {"type": "STRING"}},
                    "cloneMatches": {
                        "type": "ARRAY",
                        "items": {
                            "type": "OBJECT",
                            "properties": {
                                "region1": _REGION_SCHEMA,
                                "region2": _REGION_SCHEMA,
                                "similarity": {"type": "NUMBER"},
                            },
                            "required": ["region1", "region2", "similarity"],
                        },
                    },
                },
                "required": [
                    "finding",
                    "location",
                    "severity",
                    "artifactType",
                    "region",
                    "evidenceStrength",
                ],
            },
        },
        "coverageNotes": {"type": "STRING"},
        "imageQualityScore": {"type": "NUMBER"},
        "abstainedReasons": {"type": "ARRAY", "items": {"type": "STRING"}},
        "promptVersion": {"type": "STRING"},
    },
    "required": [
        "analysisLog",
        "overallAssessment",
        "confidenceScore",
        "summary",
        "detailedFindings",
        "coverageNotes",
        "imageQualityScore",
        "abstainedReasons",
        "promptVersion",
    ],
}

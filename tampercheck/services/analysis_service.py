"""
Document analysis dispatch.

`analyze` validates everything it can before touching the network
(provider, model family, parameters, credential), makes exactly one provider
call and always hands the raw text to the normalizer.
"""

import logging
import time

from tampercheck.config import settings
from tampercheck.core import normalizer
from tampercheck.core.credentials import resolve_credential
from tampercheck.core.errors import MissingCredential
from tampercheck.core.images import DocumentImage
from tampercheck.core.parameters import classify, parse_parameters
from tampercheck.integrations.prompts import build_prompt
from tampercheck.integrations.providers.base import ModelTarget
from tampercheck.integrations.providers.registry import PROVIDERS, resolve_provider
from tampercheck.schemas.analysis import AnalysisResult
from tampercheck.schemas.options import AnalyzeConfig, Provider

logger = logging.getLogger(__name__)


def resolve_target(provider: Provider, config: AnalyzeConfig) -> ModelTarget:
    """Pick the model, its family and the validated generation parameters."""
    deployment = None
    if provider == Provider.AZURE_OPENAI:
        deployment = config.azure_deployment or settings.azure_openai_deployment
        model = config.model or deployment
    else:
        model = config.model or PROVIDERS[provider].default_model()

    family = classify(model)
    parameters = parse_parameters(family, config.parameters)
    return ModelTarget(model=model or "", family=family, parameters=parameters, deployment=deployment)


def _require_credential(provider: Provider, config: AnalyzeConfig, target: ModelTarget) -> str:
    credential = resolve_credential(provider, config.api_keys.for_provider(provider))
    if not credential:
        raise MissingCredential(provider.value)

    if provider == Provider.AZURE_OPENAI and not (
        settings.azure_openai_endpoint and target.deployment
    ):
        raise MissingCredential(
            provider.value,
            "Azure OpenAI configuration missing. Set AZURE_OPENAI_ENDPOINT and "
            "AZURE_OPENAI_DEPLOYMENT, or name a deployment in the configuration.",
        )
    return credential


async def analyze(
    image: DocumentImage,
    user_context: str = "",
    config: AnalyzeConfig | None = None,
) -> AnalysisResult:
    """
    Analyze a document image for tampering.

    Raises UnsupportedProvider, InvalidParameters or MissingCredential before
    any network call; ProviderError or NetworkError from the call itself.
    Whatever text the provider returns is normalized, never rejected.
    """
    config = config or AnalyzeConfig()

    provider = resolve_provider(config.provider)
    target = resolve_target(provider, config)
    credential = _require_credential(provider, config, target)

    prompt = build_prompt(user_context)

    start = time.perf_counter()
    raw_text = await PROVIDERS[provider].generate(prompt, image, target, credential)
    elapsed_ms = (time.perf_counter() - start) * 1000

    logger.info(
        f"[DISPATCH] {provider.value}/{target.model} answered in {elapsed_ms:.0f}ms "
        f"({len(raw_text)} chars)"
    )

    result = normalizer.normalize(normalizer.strip_code_fence(raw_text))
    logger.info(
        f"[DISPATCH] Assessment={result.overall_assessment.value} "
        f"confidence={result.confidence_score:.2f} findings={len(result.detailed_findings)}"
    )
    return result

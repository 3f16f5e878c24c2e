"""
Error kinds raised by the analysis dispatcher.

Each carries a `user_message` suitable for display; the API layer maps them
to HTTP responses. The result normalizer never raises any of these.
"""

from typing import List, Optional


class AnalysisError(Exception):
    user_message = "The AI model failed to process the document. Please try again."


class UnsupportedProvider(AnalysisError):
    def __init__(self, name: Optional[str]):
        self.name = name
        super().__init__(f"Unsupported provider: {name}")

    @property
    def user_message(self) -> str:
        return f"Unsupported provider: {self.name}"


class MissingCredential(AnalysisError):
    def __init__(self, provider: str, detail: Optional[str] = None):
        self.provider = provider
        self.detail = detail
        super().__init__(detail or f"No usable credential for provider '{provider}'")

    @property
    def user_message(self) -> str:
        if self.detail:
            return self.detail
        return (
            f"No API key configured for {self.provider}. "
            "Provide one in the configuration or set the deployment default."
        )


class InvalidParameters(AnalysisError):
    def __init__(self, errors: List[str]):
        self.errors = errors
        super().__init__("Invalid generation parameters: " + "; ".join(errors))

    @property
    def user_message(self) -> str:
        return "Invalid model parameters: " + "; ".join(self.errors)


class ProviderError(AnalysisError):
    """Non-success HTTP status from a provider. Keeps the raw body for diagnostics."""

    def __init__(self, provider: str, status: int, body: str):
        self.provider = provider
        self.status = status
        self.body = body
        super().__init__(f"{provider} API error: {status} - {body[:500]}")

    @property
    def user_message(self) -> str:
        if self.status in (401, 403):
            return f"Invalid API key. Please check your {self.provider} API key in the configuration."
        if self.status == 429:
            return "Rate limit exceeded. Please wait a moment and try again."
        if self.status == 400:
            return "Invalid request format. This might be a model compatibility issue."
        return f"The {self.provider} model failed to process the document. Please try again."


class NetworkError(AnalysisError):
    def __init__(self, provider: str, cause: Exception):
        self.provider = provider
        self.cause = cause
        super().__init__(f"{provider} transport failure: {cause!r}")

    user_message = "Network error. Please check your internet connection and try again."

"""Custom exception types."""

from __future__ import annotations


class NotFoundError(Exception):
    """Raised when a resource is absent or not owned by the caller."""

    def __init__(self, resource: str, message: str | None = None) -> None:
        self.resource = resource
        self.message = message or f"{resource.capitalize()} not found"
        super().__init__(self.message)


class UnknownProviderError(NotFoundError):
    """Raised when no adapter is registered for a provider id."""

    def __init__(self, provider_id: str) -> None:
        super().__init__("provider", message=f"Provider {provider_id} not found")
        self.provider_id = provider_id


class MissingCredentialError(Exception):
    """Raised when the caller has no active credential for a provider."""

    def __init__(self, provider_id: str) -> None:
        self.provider_id = provider_id
        self.message = (
            f"API key for provider {provider_id} not found. Please add your API key first."
        )
        super().__init__(self.message)


class UserExistsError(Exception):
    """Raised when registering a duplicate username or email."""

    def __init__(self, message: str = "User already exists") -> None:
        super().__init__(message)
        self.message = message


class AuthenticationError(Exception):
    """Raised for invalid login credentials or access tokens."""

    def __init__(self, message: str = "Invalid credentials") -> None:
        super().__init__(message)
        self.message = message


class ConfigurationError(Exception):
    """Raised when required process configuration is missing or invalid."""


class ProviderError(Exception):
    """Base class for failures while calling a provider."""

    error_type = "provider_error"

    def __init__(self, provider_id: str, message: str = "Provider error") -> None:
        super().__init__(message)
        self.provider_id = provider_id
        self.message = message


class ProviderHttpError(ProviderError):
    """Raised when a provider answers with a non-success HTTP status."""

    error_type = "http_error"

    def __init__(
        self,
        provider_id: str,
        status_code: int,
        status_text: str,
        provider_name: str | None = None,
    ) -> None:
        label = provider_name or provider_id
        status_code = int(status_code)
        super().__init__(provider_id, message=f"{label} API error: {status_code} {status_text}")
        self.status_code = status_code
        self.status_text = status_text


class ProviderTimeoutError(ProviderError):
    """Raised when a provider does not answer within the configured timeout."""

    error_type = "timeout"

    def __init__(self, provider_id: str, timeout: float) -> None:
        super().__init__(
            provider_id, message=f"Provider {provider_id} timed out after {timeout:g}s"
        )
        self.timeout = timeout


class ProviderRequestError(ProviderError):
    """Raised when the request never reached the provider."""

    error_type = "network"


class ProviderResponseError(ProviderError):
    """Raised when the provider body cannot be decoded."""

    error_type = "unexpected_response"

"""Infrastructure layer errors."""

from idlink.domain.error import ExternalServiceError, ExternalServiceRejectedError


class AdapterError(Exception):
    """Base infrastructure error."""

    pass


class ProviderError(AdapterError, ExternalServiceError):
    """External provider unreachable or failing."""

    pass


class ProviderRejectedError(AdapterError, ExternalServiceRejectedError):
    """External provider refused the request (bad or expired code)."""

    pass

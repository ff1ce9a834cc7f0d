class SearchError(Exception):
    """Base playground search exception."""


class AdapterError(SearchError):
    """Raised inside an adapter when a provider call cannot produce results."""


class ProviderConfigurationError(AdapterError):
    """Raised when a provider credential or endpoint is not configured."""


class AuthorizationError(Exception):
    """Raised when a mutation is attempted without an authenticated session."""

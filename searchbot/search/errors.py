"""Search error taxonomy."""


class SearchError(Exception):
    """Base class for search failures."""


class TransientNetworkError(SearchError):
    """Connection failure, timeout or non-2xx response from a provider."""


class ProtocolError(SearchError):
    """A provider response is missing an expected token, field or container."""


class ValidationError(SearchError):
    """The caller supplied no usable query."""


class UnknownProviderError(SearchError):
    """Raised when provider selection fails."""


class SearchConfigError(SearchError):
    """A provider lacks configuration it needs before any request is made."""

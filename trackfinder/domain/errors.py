class ValidationError(Exception):
    """Caller supplied input the core refuses to send (empty artist, album or key)."""


class ProviderError(Exception):
    """Text provider failed: transport error, non-success status or unusable envelope."""

    def __init__(self, message: str, status_code: int = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ProviderTimeout(ProviderError):
    """Text provider did not answer within the configured timeout."""


class LookupInProgress(Exception):
    """A lookup is already running for this session."""

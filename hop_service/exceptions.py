class HopServiceError(Exception):
    """Base exception for all application-specific errors."""

    error_code = 'app:hop_service_error'


class ValidationError(HopServiceError):
    """Raised when a URL submitted for shortening is empty or malformed."""

    error_code = 'link:validation_error'


class KeyGenerationExhaustedError(HopServiceError):
    """Raised when no key could be persisted within the attempt budget."""

    error_code = 'link:key_generation_exhausted_error'

    def __init__(self, attempts: int):
        super().__init__(f'Unable to generate a unique key after {attempts} attempts.')
        self.attempts = attempts


class StoreConsistencyError(HopServiceError):
    """Raised when the link store returns more than one row for a unique key."""

    error_code = 'store:consistency_error'


class CacheUnavailableError(HopServiceError):
    """Raised by cache backends when the cache cannot serve a request."""

    error_code = 'cache:unavailable_error'

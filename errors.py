class VerificationError(Exception):
    """Base class for every error raised by the verification services."""


class ValidationError(VerificationError):
    """A required input (recipient, code, challenge id) is missing or malformed."""


class RateLimitedError(VerificationError):
    def __init__(self, retry_after: int):
        self.retry_after = retry_after
        super().__init__(
            f"Please wait {retry_after} seconds before requesting another code"
        )


class DeliveryError(VerificationError):
    """The notification could not be handed to the mail server."""


class StoreError(VerificationError):
    """The key-value store is unreachable or returned an error."""

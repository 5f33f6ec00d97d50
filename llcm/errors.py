"""
Error types raised by the lifecycle manager.

Every error surfaced to callers derives from LlcmError so the CLI can map
them to a single exit code. Cancellation is not wrapped: it propagates as
asyncio.CancelledError.
"""


class LlcmError(Exception):
    """Base class for all lifecycle manager errors."""


class BadArgumentError(LlcmError, ValueError):
    """Invalid region, desired state token, output type or unset desired state."""


class BadSyntaxError(LlcmError, ValueError):
    """Malformed filter expression (token count, unknown key or operator)."""


class BadValueError(LlcmError, ValueError):
    """Filter value that cannot be interpreted for its key."""


class BadConfigError(LlcmError):
    """Invalid tunable or settings file."""


class ProviderError(LlcmError):
    """
    Error returned by the log service.

    The SDK error message is kept as the message and the SDK
    exception is chained as __cause__.
    """

    def __init__(self, message: str, code: str = ""):
        super().__init__(message)
        self.code = code


class ThrottledError(ProviderError):
    """Rate limit response that the retry policy failed to overcome."""

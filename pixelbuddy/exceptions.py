class PixelBuddyError(Exception):
    """Base class for errors rendered as ``{error, message}`` responses."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def error(self) -> str:
        return type(self).__name__


class ValidationError(PixelBuddyError):
    status_code = 400


class NotFound(PixelBuddyError):
    status_code = 404


class GenerationExhausted(PixelBuddyError):
    status_code = 500


class ExternalServiceUnavailable(PixelBuddyError):
    """The LLM endpoint could not answer. Recovered with a canned reply."""

    status_code = 503

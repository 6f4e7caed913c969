"""Custom TTS exceptions."""


class TTSError(Exception):
    """Base exception for TTS-related errors."""

    def __init__(
        self, message: str, original_error: Exception | None = None
    ) -> None:
        super().__init__(message)
        self.original_error = original_error


class TTSAuthError(TTSError):
    """Exception raised for authentication failures.

    This typically occurs when:
    - ELEVENLABS_API_KEY is not set
    - API key is rejected by the provider (401)
    """

    pass


class TTSAPIError(TTSError):
    """Exception raised when the speech provider call does not succeed.

    Carries the provider's HTTP status when one was received. A missing
    status means the provider could not be reached at all.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(message, original_error)
        self.status_code = status_code

class ParserError(Exception):
    """Raised when resume parsing fails."""


class MalformedResponseError(ParserError):
    """Raised when the AI response is not a JSON object."""


class ParserValidationError(ParserError):
    """Raised when the parsed resume does not conform to the resume schema."""


class ParserNetworkError(ParserError):
    """Raised when the AI provider call fails due to network/infrastructure issues."""


class ParserRequestRejectedError(ParserError):
    """Raised when the AI provider refuses the request itself (HTTP 400), e.g. an oversized prompt."""

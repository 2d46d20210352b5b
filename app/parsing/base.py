from abc import ABC, abstractmethod

from app.parsing.models import ParsedResume


class BaseResumeParser(ABC):
    """Contract for all resume parser adapters."""

    @abstractmethod
    def parse(self, text: str) -> ParsedResume:
        """Turn extracted resume text into validated structured content.

        Args:
            text: Normalized, possibly truncated plain text of the resume.

        Returns:
            ParsedResume that passed schema validation and sanitization.

        Raises:
            ParserError: on any failure.
        """

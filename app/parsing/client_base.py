from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass(frozen=True)
class CompletionRequest:
    """One structured-output call: prompts plus the schema the answer must follow."""

    model: str
    system_prompt: str
    user_prompt: str
    json_schema: dict[str, object] = field(default_factory=dict)
    temperature: float = 0.0
    schema_name: str = "resume"


class BaseParserClient(ABC):
    """Sends a CompletionRequest to one AI provider."""

    @abstractmethod
    def complete(self, request: CompletionRequest) -> str:
        """Return the answer text, expected to be a JSON document.

        Raises:
            ParserNetworkError: provider unreachable, rate limited or failing.
            MalformedResponseError: provider answered without usable content.
        """

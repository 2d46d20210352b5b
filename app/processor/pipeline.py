from abc import ABC, abstractmethod
from dataclasses import dataclass

from app.messaging.models import ParseMessage
from app.parsing.models import ParsedResume


@dataclass(slots=True)
class PipelineContext:
    message: ParseMessage
    raw_bytes: bytes = b""
    extracted_text: str = ""
    prepared_text: str = ""
    truncated: bool = False
    resume: ParsedResume | None = None

    @property
    def job_id(self) -> str:
        return self.message.job_id


class PipelineStep(ABC):
    @abstractmethod
    def run(self, context: PipelineContext) -> PipelineContext:
        raise NotImplementedError

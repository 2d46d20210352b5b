from app.config.settings import Settings
from app.logging.logger import Log
from app.messaging.models import ParseMessage
from app.parsing.base import BaseResumeParser
from app.parsing.factory import ParserFactory
from app.pdf.base import BasePdfExtractor
from app.pdf.factory import PdfExtractorFactory
from app.processor.models import ProcessorResult
from app.processor.pipeline import PipelineContext, PipelineStep
from app.processor.steps import (
    ExtractTextStep,
    LoadDocumentStep,
    ParseResumeStep,
    PrepareTextStep,
)
from app.storage.base import BaseStorage


class Processor:
    """Runs one attempt of a job through the pipeline steps.

    Pipeline: load -> extract -> normalize/truncate -> parse and validate.
    Nothing is written to the store here; the caller performs the terminal
    write with the returned content.
    """

    def __init__(self, steps: list[PipelineStep]) -> None:
        self._steps = steps

    def process(self, message: ParseMessage) -> ProcessorResult:
        Log.info(f"Processing job {message.job_id} (attempt {message.attempt_number})")
        context = PipelineContext(message=message)
        for step in self._steps:
            context = step.run(context)

        if context.resume is None:
            raise RuntimeError(f"Pipeline finished without a parsed resume for job {message.job_id}")
        return ProcessorResult(
            job_id=message.job_id,
            attempt_number=message.attempt_number,
            content=context.resume.to_dict(),
            extracted_chars=len(context.extracted_text),
            truncated=context.truncated,
        )


def build_processor(
    settings: Settings,
    storage: BaseStorage,
    pdf_extractor: BasePdfExtractor | None = None,
    parser: BaseResumeParser | None = None,
) -> Processor:
    """Build a Processor with the configured adapters."""
    return Processor(
        steps=[
            LoadDocumentStep(storage),
            ExtractTextStep(pdf_extractor or PdfExtractorFactory.create(settings)),
            PrepareTextStep(settings.max_text_chars, settings.truncation_head_ratio),
            ParseResumeStep(parser or ParserFactory.create(settings)),
        ]
    )

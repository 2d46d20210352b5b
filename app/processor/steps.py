from app.jobs.hasher import content_hash
from app.logging.logger import Log
from app.parsing.base import BaseResumeParser
from app.pdf.base import BasePdfExtractor
from app.processor.exceptions import ContentMismatchError, EmptyDocumentError
from app.processor.pipeline import PipelineContext, PipelineStep
from app.processor.text import normalize_text, truncate_head_tail
from app.storage.base import BaseStorage


class LoadDocumentStep(PipelineStep):
    def __init__(self, storage: BaseStorage) -> None:
        self._storage = storage

    def run(self, context: PipelineContext) -> PipelineContext:
        raw_bytes = self._storage.get(context.message.storage_key)
        if content_hash(raw_bytes) != context.message.content_hash:
            raise ContentMismatchError(
                f"Stored object {context.message.storage_key} does not match the claimed content hash"
            )
        context.raw_bytes = raw_bytes
        Log.info(f"Loaded {len(raw_bytes)} bytes for job {context.job_id}")
        return context


class ExtractTextStep(PipelineStep):
    def __init__(self, pdf_extractor: BasePdfExtractor) -> None:
        self._pdf_extractor = pdf_extractor

    def run(self, context: PipelineContext) -> PipelineContext:
        context.extracted_text = self._pdf_extractor.extract(context.raw_bytes)
        Log.info(f"Extracted {len(context.extracted_text)} chars for job {context.job_id}")
        return context


class PrepareTextStep(PipelineStep):
    def __init__(self, max_chars: int, head_ratio: float) -> None:
        self._max_chars = max_chars
        self._head_ratio = head_ratio

    def run(self, context: PipelineContext) -> PipelineContext:
        text = normalize_text(context.extracted_text)
        if not text:
            raise EmptyDocumentError("No text could be extracted from the PDF")
        context.truncated = len(text) > self._max_chars
        context.prepared_text = truncate_head_tail(text, self._max_chars, self._head_ratio)
        if context.truncated:
            Log.warning(
                f"Job {context.job_id}: text truncated from {len(text)} to {self._max_chars} chars"
            )
        return context


class ParseResumeStep(PipelineStep):
    def __init__(self, parser: BaseResumeParser) -> None:
        self._parser = parser

    def run(self, context: PipelineContext) -> PipelineContext:
        context.resume = self._parser.parse(context.prepared_text)
        return context

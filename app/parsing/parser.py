"""AI-powered resume parser."""

import json
from pathlib import Path

from app.logging.logger import Log
from app.parsing.base import BaseResumeParser
from app.parsing.client_base import BaseParserClient, CompletionRequest
from app.parsing.exceptions import MalformedResponseError
from app.parsing.models import ParsedResume
from app.parsing.prompt_loader import load_json_schema, load_prompt_template, load_system_prompt
from app.parsing.sanitizer import sanitize_resume
from app.parsing.validator import validate_and_build


class ResumeParser(BaseResumeParser):
    """Parses resume text into structured content using an AI provider."""

    def __init__(
        self,
        *,
        client: BaseParserClient,
        model: str,
        temperature: float = 0.0,
        prompt_template_path: Path | None = None,
        json_schema_path: Path | None = None,
        system_prompt: str | None = None,
    ) -> None:
        self._client = client
        self._model = model
        self._temperature = max(0.0, min(0.2, temperature))
        self._system_prompt = system_prompt if system_prompt is not None else load_system_prompt()
        self._prompt_template = load_prompt_template(prompt_template_path)
        schema_str = load_json_schema(json_schema_path)
        self._json_schema = schema_str
        self._json_schema_dict = json.loads(schema_str)

    def parse(self, text: str) -> ParsedResume:
        prompt = self._build_prompt(text)
        Log.debug(f"Resume prompt ({len(prompt)} chars):\n{prompt}")

        raw_response = self._call_ai(prompt)
        Log.debug(f"AI raw response:\n{raw_response}")

        parsed = self._parse_json(raw_response)
        resume = sanitize_resume(validate_and_build(parsed))

        Log.info(
            f"Resume parsed: {len(resume.experience)} positions, "
            f"{len(resume.education)} education entries, {len(resume.skills)} skill groups"
        )
        return resume

    def _build_prompt(self, text: str) -> str:
        return self._prompt_template.format(
            resume_text=text,
            json_schema=self._json_schema,
        )

    def _call_ai(self, prompt: str) -> str:
        return self._client.complete(
            CompletionRequest(
                model=self._model,
                system_prompt=self._system_prompt,
                user_prompt=prompt,
                json_schema=self._json_schema_dict,
                temperature=self._temperature,
            )
        )

    @staticmethod
    def _parse_json(raw: str) -> dict[str, object]:
        cleaned = raw.strip()
        if cleaned.startswith("```"):
            lines = cleaned.splitlines()[1:]
            if lines and lines[-1].strip() == "```":
                lines = lines[:-1]
            cleaned = "\n".join(lines)

        try:
            parsed = json.loads(cleaned)
        except json.JSONDecodeError as exc:
            raise MalformedResponseError(f"Invalid JSON response: {exc}") from exc

        if not isinstance(parsed, dict):
            raise MalformedResponseError("JSON response must be an object")
        return parsed

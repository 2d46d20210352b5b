"""Tests for prompt template and JSON schema loading."""

import json
from pathlib import Path

import pytest

from app.parsing.exceptions import ParserError
from app.parsing.prompt_loader import load_json_schema, load_prompt_template, load_system_prompt


class TestLoadPromptTemplate:
    def test_loads_default_template(self) -> None:
        template = load_prompt_template()
        assert "{resume_text}" in template
        assert "{json_schema}" in template

    def test_loads_custom_template(self, tmp_path: Path) -> None:
        custom = tmp_path / "custom.txt"
        custom.write_text("Hello {resume_text}")
        result = load_prompt_template(custom)
        assert result == "Hello {resume_text}"

    def test_missing_file_raises_error(self) -> None:
        with pytest.raises(ParserError, match="Failed to load prompt"):
            load_prompt_template(Path("/nonexistent/file.txt"))


class TestLoadSystemPrompt:
    def test_loads_default_system_prompt(self) -> None:
        assert load_system_prompt().strip()

    def test_missing_file_raises_error(self) -> None:
        with pytest.raises(ParserError, match="Failed to load system prompt"):
            load_system_prompt(Path("/nonexistent/system.txt"))


class TestLoadJsonSchema:
    def test_loads_default_schema(self) -> None:
        schema = json.loads(load_json_schema())
        assert schema["type"] == "object"
        for field in ("full_name", "headline", "summary", "contact", "experience"):
            assert field in schema["required"]

    def test_loads_custom_schema(self, tmp_path: Path) -> None:
        custom = tmp_path / "schema.json"
        custom.write_text('{"type": "object"}')
        result = load_json_schema(custom)
        assert result == '{"type": "object"}'

    def test_missing_file_raises_error(self) -> None:
        with pytest.raises(ParserError, match="Failed to load JSON schema"):
            load_json_schema(Path("/nonexistent/schema.json"))

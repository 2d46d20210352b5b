from pathlib import Path

from app.parsing.exceptions import ParserError

_DEFAULT_PROMPT_DIR = Path(__file__).parent / "prompts"


def _read(path: Path, what: str) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ParserError(f"Failed to load {what}: {exc}") from exc


def load_system_prompt(path: Path | None = None) -> str:
    """Load the system prompt, by default the bundled system_prompt.txt."""
    return _read(path or _DEFAULT_PROMPT_DIR / "system_prompt.txt", "system prompt")


def load_prompt_template(path: Path | None = None) -> str:
    """Load the user prompt template.

    The template contains the placeholders {resume_text} and {json_schema}.
    Defaults to the bundled resume_prompt.txt.

    Raises:
        ParserError: if the file cannot be read.
    """
    return _read(path or _DEFAULT_PROMPT_DIR / "resume_prompt.txt", "prompt template")


def load_json_schema(path: Path | None = None) -> str:
    """Load the resume JSON schema, by default the bundled resume_schema.json.

    Raises:
        ParserError: if the file cannot be read.
    """
    return _read(path or _DEFAULT_PROMPT_DIR / "resume_schema.json", "JSON schema")

"""Validates the AI's JSON against the resume schema and builds a ParsedResume.

Output that does not conform is rejected, never coerced: a wrong type, a
missing required field or an over-long section raises ParserValidationError.
Optional fields may be absent or null.
"""

from typing import Any

from app.parsing.exceptions import ParserValidationError
from app.parsing.models import (
    Certification,
    Contact,
    Education,
    Experience,
    ParsedResume,
    Project,
    SkillGroup,
)

_MAX_ENTRIES = 100
_MAX_LIST_ITEMS = 200
_CONTACT_URL_FIELDS = ("linkedin", "github", "website", "behance", "dribbble")


def validate_and_build(data: dict[str, Any]) -> ParsedResume:
    """Validate raw parsed JSON and build a ParsedResume.

    Raises:
        ParserValidationError: on any schema violation.
    """
    _require_top_level_fields(data)
    return ParsedResume(
        full_name=_string(data["full_name"], "full_name"),
        headline=_string(data["headline"], "headline", allow_empty=True),
        summary=_string(data["summary"], "summary", allow_empty=True),
        contact=_build_contact(data["contact"]),
        experience=[
            _build_experience(item, f"experience[{i}]")
            for i, item in enumerate(_entries(data["experience"], "experience"))
        ],
        education=[
            _build_education(item, f"education[{i}]")
            for i, item in enumerate(_entries(data.get("education"), "education"))
        ],
        skills=[
            _build_skill_group(item, f"skills[{i}]")
            for i, item in enumerate(_entries(data.get("skills"), "skills"))
        ],
        certifications=[
            _build_certification(item, f"certifications[{i}]")
            for i, item in enumerate(_entries(data.get("certifications"), "certifications"))
        ],
        projects=[
            _build_project(item, f"projects[{i}]")
            for i, item in enumerate(_entries(data.get("projects"), "projects"))
        ],
    )


def _require_top_level_fields(data: dict[str, Any]) -> None:
    for field in ("full_name", "headline", "summary", "contact", "experience"):
        if field not in data:
            raise ParserValidationError(f"Missing required top-level field: {field}")


def _string(raw: Any, path: str, *, allow_empty: bool = False) -> str:
    if not isinstance(raw, str):
        raise ParserValidationError(f"'{path}' must be a string")
    if not allow_empty and not raw.strip():
        raise ParserValidationError(f"'{path}' must be a non-empty string")
    return raw


def _optional_string(raw: Any, path: str) -> str | None:
    if raw is None:
        return None
    if not isinstance(raw, str):
        raise ParserValidationError(f"'{path}' must be a string or null")
    return raw


def _string_list(raw: Any, path: str, *, min_items: int = 0) -> list[str]:
    if raw is None and min_items == 0:
        return []
    if not isinstance(raw, list):
        raise ParserValidationError(f"'{path}' must be a list")
    if len(raw) < min_items:
        raise ParserValidationError(f"'{path}' must have at least {min_items} item(s)")
    if len(raw) > _MAX_LIST_ITEMS:
        raise ParserValidationError(f"Too many items in '{path}': {len(raw)} (max {_MAX_LIST_ITEMS})")
    for i, item in enumerate(raw):
        if not isinstance(item, str):
            raise ParserValidationError(f"'{path}[{i}]' must be a string")
    return raw


def _entries(raw: Any, path: str) -> list[dict[str, Any]]:
    if raw is None and path != "experience":
        return []
    if not isinstance(raw, list):
        raise ParserValidationError(f"'{path}' must be a list")
    if len(raw) > _MAX_ENTRIES:
        raise ParserValidationError(f"Too many entries in '{path}': {len(raw)} (max {_MAX_ENTRIES})")
    for i, item in enumerate(raw):
        if not isinstance(item, dict):
            raise ParserValidationError(f"'{path}[{i}]' must be an object")
    return raw


def _build_contact(raw: Any) -> Contact:
    if not isinstance(raw, dict):
        raise ParserValidationError("'contact' must be an object")
    if "email" not in raw:
        raise ParserValidationError("Missing required field: contact.email")
    urls = {name: _optional_string(raw.get(name), f"contact.{name}") for name in _CONTACT_URL_FIELDS}
    return Contact(
        email=_string(raw["email"], "contact.email", allow_empty=True),
        phone=_optional_string(raw.get("phone"), "contact.phone"),
        location=_optional_string(raw.get("location"), "contact.location"),
        **urls,
    )


def _build_experience(raw: dict[str, Any], path: str) -> Experience:
    return Experience(
        title=_string(raw.get("title"), f"{path}.title"),
        company=_string(raw.get("company"), f"{path}.company"),
        start_date=_string(raw.get("start_date"), f"{path}.start_date", allow_empty=True),
        description=_string(raw.get("description"), f"{path}.description", allow_empty=True),
        location=_optional_string(raw.get("location"), f"{path}.location"),
        end_date=_optional_string(raw.get("end_date"), f"{path}.end_date"),
        highlights=_string_list(raw.get("highlights"), f"{path}.highlights"),
    )


def _build_education(raw: dict[str, Any], path: str) -> Education:
    return Education(
        degree=_string(raw.get("degree"), f"{path}.degree"),
        institution=_string(raw.get("institution"), f"{path}.institution", allow_empty=True),
        location=_optional_string(raw.get("location"), f"{path}.location"),
        graduation_date=_optional_string(raw.get("graduation_date"), f"{path}.graduation_date"),
        gpa=_optional_string(raw.get("gpa"), f"{path}.gpa"),
    )


def _build_skill_group(raw: dict[str, Any], path: str) -> SkillGroup:
    return SkillGroup(
        category=_string(raw.get("category"), f"{path}.category"),
        items=_string_list(raw.get("items"), f"{path}.items", min_items=1),
    )


def _build_certification(raw: dict[str, Any], path: str) -> Certification:
    return Certification(
        name=_string(raw.get("name"), f"{path}.name"),
        issuer=_string(raw.get("issuer"), f"{path}.issuer", allow_empty=True),
        date=_optional_string(raw.get("date"), f"{path}.date"),
        url=_optional_string(raw.get("url"), f"{path}.url"),
    )


def _build_project(raw: dict[str, Any], path: str) -> Project:
    return Project(
        title=_string(raw.get("title"), f"{path}.title"),
        description=_string(raw.get("description"), f"{path}.description", allow_empty=True),
        year=_optional_string(raw.get("year"), f"{path}.year"),
        technologies=_string_list(raw.get("technologies"), f"{path}.technologies"),
        url=_optional_string(raw.get("url"), f"{path}.url"),
        image_url=_optional_string(raw.get("image_url"), f"{path}.image_url"),
    )

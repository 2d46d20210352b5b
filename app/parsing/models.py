from dataclasses import asdict, dataclass, field
from typing import Any

_OPTIONAL_LISTS = frozenset(
    {"education", "skills", "certifications", "projects", "highlights", "technologies"}
)


@dataclass(frozen=True)
class Contact:
    """Contact details. Only email is always present (possibly empty)."""

    email: str = ""
    phone: str | None = None
    location: str | None = None
    linkedin: str | None = None
    github: str | None = None
    website: str | None = None
    behance: str | None = None
    dribbble: str | None = None


@dataclass(frozen=True)
class Experience:
    title: str
    company: str
    start_date: str
    description: str = ""
    location: str | None = None
    end_date: str | None = None
    highlights: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class Education:
    degree: str
    institution: str = ""
    location: str | None = None
    graduation_date: str | None = None
    gpa: str | None = None


@dataclass(frozen=True)
class SkillGroup:
    category: str
    items: list[str]


@dataclass(frozen=True)
class Certification:
    name: str
    issuer: str = ""
    date: str | None = None
    url: str | None = None


@dataclass(frozen=True)
class Project:
    title: str
    description: str = ""
    year: str | None = None
    technologies: list[str] = field(default_factory=list)
    url: str | None = None
    image_url: str | None = None


@dataclass(frozen=True)
class ParsedResume:
    """Validated structured content of one resume."""

    full_name: str
    headline: str
    summary: str
    contact: Contact
    experience: list[Experience] = field(default_factory=list)
    education: list[Education] = field(default_factory=list)
    skills: list[SkillGroup] = field(default_factory=list)
    certifications: list[Certification] = field(default_factory=list)
    projects: list[Project] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready content with absent optional fields and empty sections removed."""
        return _compact(asdict(self))


def _compact(value: Any) -> Any:
    if isinstance(value, dict):
        return {
            key: _compact(item)
            for key, item in value.items()
            if item is not None and not (key in _OPTIONAL_LISTS and item == [])
        }
    if isinstance(value, list):
        return [_compact(item) for item in value]
    return value

"""Sanitizes validated resume content before it is stored and rendered.

The AI output is untrusted: strings are trimmed and capped, URLs with
script-capable schemes or pathological shapes are dropped, and emails that
do not look like emails are blanked.
"""

import re
from dataclasses import replace
from urllib.parse import urlsplit

from app.parsing.models import (
    Certification,
    Contact,
    Education,
    Experience,
    ParsedResume,
    Project,
    SkillGroup,
)

_REPEATING_SEGMENT = re.compile(r"/([^/]+)/\1(?:/|$)")
_EMAIL = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_YEAR = re.compile(r"(\d{4})")
_BLOCKED_SCHEMES = ("javascript:", "data:", "vbscript:")
_ALLOWED_SCHEMES = ("http://", "https://", "mailto:")
_MAX_URL_LENGTH = 500
_MAX_URL_SEGMENTS = 12
_MAX_HOSTNAME_LENGTH = 253


def truncate(value: str, max_length: int) -> str:
    """Cap value at max_length characters, marking the cut with '...'."""
    if len(value) <= max_length:
        return value
    return f"{value[: max_length - 3]}..."


def clean_text(value: str | None, max_length: int) -> str | None:
    """Trim and cap an optional string; blank strings become None."""
    if value is None:
        return None
    stripped = value.strip()
    return truncate(stripped, max_length) if stripped else None


def sanitize_email(value: str) -> str:
    candidate = value.strip().lower()
    if not _EMAIL.match(candidate):
        return ""
    return re.sub(r"[<>'\"]", "", candidate)


def normalize_url(value: str) -> str | None:
    """Add https:// to scheme-less URLs; None for blocked schemes."""
    trimmed = value.strip()
    if not trimmed:
        return None
    lower = trimmed.lower()
    if lower.startswith(_ALLOWED_SCHEMES):
        return trimmed
    if lower.startswith(_BLOCKED_SCHEMES):
        return None
    return f"https://{trimmed}"


def validate_url(value: str | None) -> str | None:
    """Return a normalized URL, or None if it is unsafe or implausible."""
    if not value or not value.strip():
        return None
    trimmed = value.strip()
    if len(trimmed) > _MAX_URL_LENGTH:
        return None
    if _REPEATING_SEGMENT.search(trimmed):
        return None
    if len([segment for segment in trimmed.split("/") if segment]) > _MAX_URL_SEGMENTS:
        return None
    normalized = normalize_url(trimmed)
    if normalized is None:
        return None
    try:
        parts = urlsplit(normalized)
    except ValueError:
        return None
    if parts.scheme == "mailto":
        return normalized
    hostname = parts.hostname or ""
    if "." not in hostname or len(hostname) > _MAX_HOSTNAME_LENGTH:
        return None
    return normalized


def sanitize_resume(resume: ParsedResume) -> ParsedResume:
    """Apply length caps, URL and email rules, and the summary fallback."""
    headline = truncate(resume.headline.strip() or "Professional", 150)
    experience = [_sanitize_experience(item) for item in resume.experience]
    return ParsedResume(
        full_name=truncate(resume.full_name.strip(), 100),
        headline=headline,
        summary=truncate(_summary_or_fallback(resume.summary, experience, headline), 2000),
        contact=_sanitize_contact(resume.contact),
        experience=experience,
        education=[_sanitize_education(item) for item in resume.education],
        skills=[group for group in map(_sanitize_skill_group, resume.skills) if group.items],
        certifications=[_sanitize_certification(item) for item in resume.certifications],
        projects=[_sanitize_project(item) for item in resume.projects],
    )


def _summary_or_fallback(summary: str, experience: list[Experience], headline: str) -> str:
    if summary.strip():
        return summary.strip()
    if experience and experience[0].description:
        return experience[0].description[:500]
    return f"Experienced {headline.lower()} with a proven track record."


def _sanitize_contact(contact: Contact) -> Contact:
    linkedin = validate_url(contact.linkedin)
    website = validate_url(contact.website)
    if website and "linkedin.com" in website and not linkedin:
        linkedin, website = website, None
    if website and website == linkedin:
        website = None
    return Contact(
        email=sanitize_email(contact.email),
        phone=clean_text(contact.phone, 30),
        location=clean_text(contact.location, 100),
        linkedin=linkedin,
        github=validate_url(contact.github),
        website=website,
        behance=validate_url(contact.behance),
        dribbble=validate_url(contact.dribbble),
    )


def _sanitize_experience(item: Experience) -> Experience:
    return Experience(
        title=truncate(item.title.strip(), 150),
        company=truncate(item.company.strip(), 150),
        start_date=item.start_date.strip(),
        description=truncate(item.description.strip(), 2000),
        location=clean_text(item.location, 100),
        end_date=clean_text(item.end_date, 50),
        highlights=_clean_items(item.highlights, 500),
    )


def _sanitize_education(item: Education) -> Education:
    return Education(
        degree=truncate(item.degree.strip(), 150),
        institution=truncate(item.institution.strip(), 150),
        location=clean_text(item.location, 100),
        graduation_date=clean_text(item.graduation_date, 50),
        gpa=clean_text(item.gpa, 20),
    )


def _sanitize_skill_group(group: SkillGroup) -> SkillGroup:
    return SkillGroup(
        category=truncate(group.category.strip(), 100),
        items=_clean_items(group.items, 100),
    )


def _sanitize_certification(item: Certification) -> Certification:
    return Certification(
        name=truncate(item.name.strip(), 150),
        issuer=truncate(item.issuer.strip(), 150),
        date=clean_text(item.date, 50),
        url=validate_url(item.url),
    )


def _sanitize_project(item: Project) -> Project:
    year = clean_text(item.year, 50)
    if year:
        match = _YEAR.search(year)
        if match:
            year = match.group(1)
    return replace(
        item,
        title=truncate(item.title.strip(), 150),
        description=truncate(item.description.strip(), 1000),
        year=year,
        technologies=_clean_items(item.technologies, 50),
        url=validate_url(item.url),
        image_url=validate_url(item.image_url),
    )


def _clean_items(items: list[str], max_length: int) -> list[str]:
    return [truncate(item.strip(), max_length) for item in items if item.strip()]

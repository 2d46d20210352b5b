import copy
from typing import Any

import pytest

from app.parsing.exceptions import ParserValidationError
from app.parsing.validator import validate_and_build


def _make_data(**overrides: Any) -> dict[str, Any]:
    data: dict[str, Any] = {
        "full_name": "Jane Doe",
        "headline": "Backend Engineer",
        "summary": "Builds services.",
        "contact": {"email": "jane@example.com", "phone": None},
        "experience": [
            {
                "title": "Engineer",
                "company": "Acme",
                "start_date": "2020-01",
                "end_date": None,
                "description": "Did things.",
                "highlights": ["Shipped X"],
            }
        ],
    }
    data.update(overrides)
    return copy.deepcopy(data)


class TestValidateAndBuild:
    def test_builds_minimal_resume(self) -> None:
        resume = validate_and_build(_make_data())

        assert resume.full_name == "Jane Doe"
        assert resume.contact.email == "jane@example.com"
        assert resume.contact.phone is None
        assert resume.experience[0].highlights == ["Shipped X"]
        assert resume.education == []
        assert resume.skills == []

    def test_optional_sections_may_be_null(self) -> None:
        resume = validate_and_build(_make_data(education=None, projects=None, certifications=None))
        assert resume.education == []
        assert resume.projects == []

    def test_builds_all_sections(self) -> None:
        resume = validate_and_build(
            _make_data(
                education=[{"degree": "BSc", "institution": "TU Berlin", "gpa": "1.3"}],
                skills=[{"category": "Languages", "items": ["Python"]}],
                certifications=[{"name": "CKA", "issuer": "CNCF", "url": None}],
                projects=[{"title": "Tool", "technologies": ["Go"], "year": "2022"}],
            )
        )
        assert resume.education[0].gpa == "1.3"
        assert resume.skills[0].items == ["Python"]
        assert resume.certifications[0].issuer == "CNCF"
        assert resume.projects[0].technologies == ["Go"]

    @pytest.mark.parametrize("field", ["full_name", "headline", "summary", "contact", "experience"])
    def test_missing_top_level_field_raises(self, field: str) -> None:
        data = _make_data()
        del data[field]
        with pytest.raises(ParserValidationError, match=field):
            validate_and_build(data)

    def test_empty_full_name_raises(self) -> None:
        with pytest.raises(ParserValidationError, match="full_name"):
            validate_and_build(_make_data(full_name="   "))

    def test_wrong_type_is_rejected_not_coerced(self) -> None:
        with pytest.raises(ParserValidationError, match="headline"):
            validate_and_build(_make_data(headline=42))

    def test_missing_contact_email_raises(self) -> None:
        with pytest.raises(ParserValidationError, match="contact.email"):
            validate_and_build(_make_data(contact={"phone": "123"}))

    def test_error_names_the_offending_entry(self) -> None:
        data = _make_data()
        data["experience"].append({"title": "", "company": "Beta", "start_date": "", "description": ""})
        with pytest.raises(ParserValidationError, match=r"experience\[1\]\.title"):
            validate_and_build(data)

    def test_experience_must_be_a_list(self) -> None:
        with pytest.raises(ParserValidationError, match="'experience' must be a list"):
            validate_and_build(_make_data(experience=None))

    def test_skill_group_needs_items(self) -> None:
        with pytest.raises(ParserValidationError, match=r"skills\[0\]\.items"):
            validate_and_build(_make_data(skills=[{"category": "Tools", "items": []}]))

    def test_non_string_list_item_raises(self) -> None:
        data = _make_data()
        data["experience"][0]["highlights"] = ["ok", 3]
        with pytest.raises(ParserValidationError, match=r"highlights\[1\]"):
            validate_and_build(data)

    def test_too_many_entries_raises(self) -> None:
        entry = {"degree": "BSc", "institution": "Uni"}
        with pytest.raises(ParserValidationError, match="Too many entries in 'education'"):
            validate_and_build(_make_data(education=[entry] * 101))

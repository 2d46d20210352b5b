import json

from app.parsing.client_base import CompletionRequest
from app.parsing.example_client_adapter import ExampleClientAdapter
from app.parsing.parser import ResumeParser
from app.parsing.validator import validate_and_build


def _request(**overrides: object) -> CompletionRequest:
    fields: dict[str, object] = {"model": "any", "system_prompt": "sys", "user_prompt": "user"}
    fields.update(overrides)
    return CompletionRequest(**fields)  # type: ignore[arg-type]


class TestExampleClientAdapter:
    def test_answer_is_schema_conforming_resume(self) -> None:
        resume = validate_and_build(json.loads(ExampleClientAdapter().complete(_request())))

        assert resume.full_name == "Jane Doe"
        assert resume.contact.email == "jane.doe@example.com"
        assert resume.experience[0].company == "Example GmbH"

    def test_answer_does_not_depend_on_request(self) -> None:
        adapter = ExampleClientAdapter()

        first = adapter.complete(_request(model="a", user_prompt="one"))
        second = adapter.complete(_request(model="b", user_prompt="two", temperature=0.2))

        assert first == second

    def test_drives_parser_end_to_end(self) -> None:
        parser = ResumeParser(client=ExampleClientAdapter(), model="example")

        resume = parser.parse("Jane Doe\nSoftware Engineer")

        assert resume.headline == "Software Engineer"
        assert resume.skills[0].items == ["Python", "SQL"]

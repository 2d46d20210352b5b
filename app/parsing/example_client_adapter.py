"""Offline parser client.

Returns a fixed, schema-conforming resume so the whole pipeline can run
locally without an AI provider. Also a template for new provider adapters:
implement BaseParserClient.complete and register the provider in ParserFactory.
"""

import json
from typing import ClassVar

from app.parsing.client_base import BaseParserClient, CompletionRequest


class ExampleClientAdapter(BaseParserClient):
    """Adapter that answers every prompt with DEFAULT_RESPONSE. No network calls."""

    DEFAULT_RESPONSE: ClassVar[dict[str, object]] = {
        "full_name": "Jane Doe",
        "headline": "Software Engineer",
        "summary": "Software engineer with experience building backend services.",
        "contact": {
            "email": "jane.doe@example.com",
            "phone": None,
            "location": "Berlin, Germany",
            "linkedin": None,
            "github": "https://github.com/janedoe",
            "website": None,
            "behance": None,
            "dribbble": None,
        },
        "experience": [
            {
                "title": "Software Engineer",
                "company": "Example GmbH",
                "location": None,
                "start_date": "2021-03",
                "end_date": "Present",
                "description": "Builds and operates document processing services.",
                "highlights": [],
            }
        ],
        "education": [],
        "skills": [{"category": "Languages", "items": ["Python", "SQL"]}],
        "certifications": [],
        "projects": [],
    }

    def complete(self, request: CompletionRequest) -> str:
        _ = request
        return json.dumps(self.DEFAULT_RESPONSE)

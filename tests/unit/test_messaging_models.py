from typing import Any

import pytest

from app.messaging.models import ParseMessage


def _payload(**overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "type": "parse",
        "job_id": "job-1",
        "owner_id": "owner-1",
        "storage_key": "owner-1/resume.pdf",
        "content_hash": "a" * 64,
        "attempt_number": 2,
    }
    payload.update(overrides)
    return payload


class TestParseMessage:
    def test_from_dict(self) -> None:
        message = ParseMessage.from_dict(_payload())

        assert message.job_id == "job-1"
        assert message.attempt_number == 2
        assert message.type == "parse"

    def test_to_dict_carries_every_field(self) -> None:
        assert ParseMessage.from_dict(_payload()).to_dict() == _payload()

    def test_type_defaults_to_parse(self) -> None:
        payload = _payload()
        del payload["type"]
        assert ParseMessage.from_dict(payload).type == "parse"

    @pytest.mark.parametrize("field", ["job_id", "owner_id", "storage_key", "content_hash"])
    def test_missing_string_field(self, field: str) -> None:
        payload = _payload()
        del payload[field]
        with pytest.raises(ValueError, match=field):
            ParseMessage.from_dict(payload)

    @pytest.mark.parametrize("attempt", [0, -1, "2", True, None])
    def test_attempt_number_must_be_positive_int(self, attempt: Any) -> None:
        with pytest.raises(ValueError, match="attempt_number"):
            ParseMessage.from_dict(_payload(attempt_number=attempt))

    def test_unknown_type(self) -> None:
        with pytest.raises(ValueError, match="Unsupported message type"):
            ParseMessage.from_dict(_payload(type="render"))

    def test_non_object_payload(self) -> None:
        with pytest.raises(ValueError, match="must be an object"):
            ParseMessage.from_dict(["job-1"])

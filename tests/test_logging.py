"""
Log formatting tests.
"""
import json
import logging

from core.logging import JSONFormatter, TextFormatter, athlete_extra


def make_record(message="Processed session", **extra):
    record = logging.LogRecord("services.session_service", logging.INFO, __file__, 10, message, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestFormatters:

    def test_json_merges_athlete_fields(self):
        record = make_record(**athlete_extra("abc", rule_id="volume_spike"))

        payload = json.loads(JSONFormatter().format(record))

        assert payload["message"] == "Processed session"
        assert payload["service"] == "mpi-engine"
        assert payload["athlete_id"] == "abc"
        assert payload["rule_id"] == "volume_spike"

    def test_text_appends_fields(self):
        record = make_record(**athlete_extra("abc", sport="softball"))

        line = TextFormatter().format(record)

        assert line.endswith("| athlete_id=abc sport=softball")

    def test_text_without_fields(self):
        line = TextFormatter().format(make_record())
        assert "|" not in line
        assert line.endswith("Processed session")

"""Key management, redaction and structured log scrubbing."""

from __future__ import annotations

import io
import json

import pytest

from tripmesh.infrastructure.logging import StructuredLogger
from tripmesh.security.key_manager import KeyManager, get_key_manager
from tripmesh.security.redact import redact_sensitive
from tripmesh.shared.exceptions import KeyMissingError

# Test sentinels only; intentionally fake values.
TEST_FAKE_SECRET = "TEST_FAKE_SECRET_VALUE"


class TestKeyManager:
    def test_get_from_env(self, monkeypatch):
        monkeypatch.setenv("ORS_API_KEY", "test_key_12345678")
        assert KeyManager().get("ORS_API_KEY") == "test_key_12345678"

    def test_get_missing_not_required(self):
        assert KeyManager().get("ORS_API_KEY", required=False) is None

    def test_get_missing_required_raises(self):
        with pytest.raises(KeyMissingError):
            KeyManager().get("ORS_API_KEY", required=True)

    def test_redact(self):
        assert KeyManager.redact("abc") == "****"
        assert KeyManager.redact("abcdefghijklmnop") == "abcd****mnop"

    def test_scrub_text_replaces_loaded_keys(self, monkeypatch):
        monkeypatch.setenv("GOOGLE_MAPS_API_KEY", TEST_FAKE_SECRET)
        km = KeyManager()
        km.get("GOOGLE_MAPS_API_KEY")

        scrubbed = km.scrub_text(f"directions failed for {TEST_FAKE_SECRET}")
        assert TEST_FAKE_SECRET not in scrubbed
        assert scrubbed == "directions failed for [REDACTED:GOOGLE_MAPS_API_KEY]"

    def test_scrub_text_is_stable_when_applied_again(self, monkeypatch):
        monkeypatch.setenv("ORS_API_KEY", TEST_FAKE_SECRET)
        km = KeyManager()
        km.get("ORS_API_KEY")

        once = km.scrub_text(f"ors said {TEST_FAKE_SECRET}; retry with api_key={TEST_FAKE_SECRET}")
        assert TEST_FAKE_SECRET not in once
        assert "[REDACTED:ORS_API_KEY]" in once
        assert km.scrub_text(once) == once
        assert redact_sensitive(once) == once

    def test_reload_drops_removed_keys(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test-1234567890")
        km = KeyManager()
        assert km.has_key("OPENAI_API_KEY")
        km.get("OPENAI_API_KEY")
        monkeypatch.delenv("OPENAI_API_KEY")
        km.reload("OPENAI_API_KEY")
        assert not km.has_key("OPENAI_API_KEY")


@pytest.mark.parametrize(
    "raw, secret",
    [
        ("GET /directions/json?origin=1,2&key=abc123def", "abc123def"),
        ('{"api_key": "zzz999"}', "zzz999"),
        ("Authorization: Bearer tok_456", "tok_456"),
        ("openai said sk-abcdefghijklmnop", "sk-abcdefghijklmnop"),
        ("google key AIzaSyA1234567890abcdefghijk", "AIzaSyA1234567890abcdefghijk"),
    ],
)
def test_redact_sensitive_patterns(raw, secret):
    assert secret not in redact_sensitive(raw)


def test_structured_logger_scrubs_and_tags_events(monkeypatch):
    monkeypatch.setenv("LOCATIONIQ_API_KEY", TEST_FAKE_SECRET)
    get_key_manager().reload("LOCATIONIQ_API_KEY")

    output = io.StringIO()
    logger = StructuredLogger(trace_id="abc", output=output)
    logger.source_start("single_mode")
    logger.source_end("single_mode", status="failed", error=f"rejected {TEST_FAKE_SECRET}")

    lines = [json.loads(line) for line in output.getvalue().splitlines()]
    assert [line["event"] for line in lines] == ["source_start", "source_end"]
    assert lines[1]["status"] == "failed"
    assert lines[1]["duration_ms"] >= 0
    assert TEST_FAKE_SECRET not in output.getvalue()


def test_structured_logger_ignores_closed_stream():
    output = io.StringIO()
    output.close()
    StructuredLogger(output=output).warning("filter", "nothing kept")

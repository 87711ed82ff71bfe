"""Tests for config.py."""

import pytest
from pydantic import ValidationError

from statuscheck.config import Settings


class TestSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("STATUS_CHECK_DEADLINE_SECS", raising=False)
        s = Settings(_env_file=None)
        assert s.STATUS_CHECK_DEADLINE_SECS == 600
        assert s.STATUS_CHECK_POLL_INTERVAL_SECS == 1.0
        assert s.STATUS_CHECK_REPORT_INTERVAL_SECS == 0.5
        assert s.K8S_NAMESPACE == "default"
        assert s.HTTP_PORT == 8002
        assert s.STATUS_CHECK_REQUEST_TIMEOUT_SECS == 10
        assert not hasattr(s, "APP_ENV")

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("STATUS_CHECK_DEADLINE_SECS", "120")
        monkeypatch.setenv("K8S_NAMESPACE", "staging")
        s = Settings(_env_file=None)
        assert s.STATUS_CHECK_DEADLINE_SECS == 120
        assert s.K8S_NAMESPACE == "staging"

    def test_deadline_must_be_positive(self, monkeypatch):
        monkeypatch.setenv("STATUS_CHECK_DEADLINE_SECS", "0")
        with pytest.raises(ValidationError):
            Settings(_env_file=None)

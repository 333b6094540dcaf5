"""Shared pytest fixtures."""

import pytest

from gst_invoicing.config.profile_manager import reset_profile


@pytest.fixture(autouse=True)
def clean_profile(monkeypatch):
    """Run every test against the bundled default profile."""
    for name in ("GST_INVOICING_PROFILE", "GST_INVOICING_PROFILES_DIR", "GST_INVOICING_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    reset_profile()
    yield
    reset_profile()

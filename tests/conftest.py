"""
Shared test fixtures.
"""

import pytest

from bmctl import config

# Settings an env file may set during a test
ENV_SETTINGS = (
    "BMC_DOCUMENTS_PATH",
    "BMC_MANAGEMENT_TYPE",
    "BMC_INSECURE",
    "BMC_SYSTEM_ACTION_RETRIES",
    "BMC_SYSTEM_REBOOT_DELAY",
    "K8S_API_SERVER",
    "K8S_TOKEN",
)


@pytest.fixture
def isolated_env(monkeypatch):
    """Start without environment settings and restore them, and the config classes, afterwards."""
    for name in ENV_SETTINGS:
        # setenv first so undo() also removes values an env file adds
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    config.refresh_settings()
    yield monkeypatch
    monkeypatch.undo()
    config.refresh_settings()

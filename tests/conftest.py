import pytest

from crpt_api.core.config import get_settings
from crpt_api.services import crpt_gateway


@pytest.fixture(autouse=True)
def _settings_env(monkeypatch) -> None:
    """
    Pin the CRPT endpoint and keep throttle cooldown out of the way for tests.

    Tests that exercise throttling build their own Throttle or override
    the CRPT_RL_* variables.
    """
    monkeypatch.setenv("CRPT_BASE_URL", "https://crpt.test/api/v3")
    monkeypatch.setenv("CRPT_SIGNATURE", "test-sign")
    monkeypatch.setenv("CRPT_RL_COOLDOWN_S", "0")
    monkeypatch.delenv("CRPT_RL_CAPACITY", raising=False)
    monkeypatch.delenv("CRPT_RL_ACQUIRE_TIMEOUT_S", raising=False)

    # Clear cached Settings so env changes take effect
    get_settings.cache_clear()
    crpt_gateway.reset_crpt_api()

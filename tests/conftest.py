import pytest

from hedger.config.dashboard_config import AccountCredential


@pytest.fixture
def account():
    return AccountCredential(
        id="1", name="Main", api_key="bg_test_key_123456",
        api_secret="test_secret", passphrase="test_pass", enabled=True
    )


@pytest.fixture
def second_account():
    return AccountCredential(
        id="2", name="Hedge", api_key="bg_other_key_654321",
        api_secret="other_secret", passphrase="other_pass", enabled=True
    )

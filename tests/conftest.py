import pathlib
import sys

import pytest

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from zaim_mcp.zaim_client import OAuthCredentials  # noqa: E402


@pytest.fixture
def credentials() -> OAuthCredentials:
    return OAuthCredentials(
        consumer_key="test_consumer_key",
        consumer_secret="test_consumer_secret",
        access_token="test_access_token",
        access_token_secret="test_access_token_secret",
    )

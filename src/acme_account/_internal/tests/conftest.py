from unittest import mock

import pytest


@pytest.fixture(autouse=True)
def mock_session_request():
    """Fail loudly if a test reaches the real network."""
    with mock.patch("requests.Session.request",
                    side_effect=AssertionError("unexpected network access")) as mocked:
        yield mocked

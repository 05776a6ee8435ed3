from __future__ import annotations

import pytest

from milan_client_sdk import load_config

from closing_fakes import FakeSession


@pytest.fixture
def fake_session() -> FakeSession:
    return FakeSession(config=load_config())

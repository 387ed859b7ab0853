import os

import pytest

from parkpal.data_loader import load_spaces_from_file

FIXTURE_PATH = os.path.join(os.path.dirname(__file__), "..", "parkpal", "data", "spaces.json")


@pytest.fixture
def fixture_path() -> str:
    return FIXTURE_PATH


@pytest.fixture
def inventory():
    return load_spaces_from_file(FIXTURE_PATH).spaces


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text
        self.content = b"" if payload is None else b"{}"

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload

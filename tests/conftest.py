import json
from pathlib import Path

import httpx
import pytest


FIXTURES = Path(__file__).resolve().parent / "fixtures"


def _handler(routes):
    """
    routes: {url substring: (status, json payload) | Exception}
    First matching substring wins; unmatched URLs get 404.
    """

    def handle(request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        for needle, outcome in routes.items():
            if needle in url:
                if isinstance(outcome, Exception):
                    raise outcome
                status, payload = outcome
                if isinstance(payload, (bytes, str)):
                    return httpx.Response(status, content=payload)
                return httpx.Response(status, json=payload)
        return httpx.Response(404, json={"error": "no route"})

    return handle


@pytest.fixture
def fixture_json():
    def load(name: str):
        return json.loads((FIXTURES / name).read_text(encoding="utf-8"))

    return load


@pytest.fixture
def mock_client():
    """Factory: routes -> httpx.AsyncClient backed by MockTransport."""

    def make(routes) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(_handler(routes)))

    return make

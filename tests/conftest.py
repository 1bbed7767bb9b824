"""Shared pytest fixtures for coronanet tests."""

from unittest.mock import Mock

import pytest


def make_response(text="", status_code=200, url="http://api.test/resource"):
    resp = Mock()
    resp.status_code = status_code
    resp.ok = 200 <= status_code < 400
    resp.text = text
    resp.content = text.encode("utf-8")
    resp.url = url
    resp.iter_content = lambda chunk_size=None: iter([resp.content])
    return resp


@pytest.fixture
def api_url(monkeypatch):
    """Point the client at a fake service root."""
    monkeypatch.setattr("coronanet.config.API_URL", "http://api.test")
    return "http://api.test"


@pytest.fixture
def csv_response():
    """Factory for fake CSV responses."""
    return make_response

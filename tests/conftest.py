"""Shared pytest fixtures for repo-depgraph tests."""

import httpx
import pytest

from repo_depgraph.graph.builder import GraphBuilder
from repo_depgraph.languages.detector import LanguageDetector
from repo_depgraph.languages.registry import create_default_registry
from repo_depgraph.parsers.registry import create_default_parser_registry
from repo_depgraph.sources.github_client import GITHUB_API_URL, GitHubClient


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def languages():
    return create_default_registry()


@pytest.fixture
def parsers(languages):
    return create_default_parser_registry(languages)


@pytest.fixture
def detector(languages):
    return LanguageDetector(languages)


@pytest.fixture
def builder(parsers):
    return GraphBuilder(parsers)


@pytest.fixture
def js_parser(parsers):
    return parsers.get_parser("javascript")


@pytest.fixture
def py_parser(parsers):
    return parsers.get_parser("python")


@pytest.fixture
def routed_github():
    """Build a GitHubClient that answers from a ``{url path: httpx.Response}`` table.

    Unknown paths get a 404, like a missing branch or file would.
    """

    def _factory(routes: dict[str, httpx.Response]) -> GitHubClient:
        def handler(request: httpx.Request) -> httpx.Response:
            canned = routes.get(request.url.path)
            if canned is None:
                return httpx.Response(404, json={"message": "Not Found"})
            return httpx.Response(
                canned.status_code, headers=canned.headers, content=canned.content
            )

        client = GitHubClient.__new__(GitHubClient)
        client._client = httpx.AsyncClient(
            base_url=GITHUB_API_URL, transport=httpx.MockTransport(handler)
        )
        return client

    return _factory

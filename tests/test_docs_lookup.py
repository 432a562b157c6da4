"""Tests for the API docs lookup."""

from __future__ import annotations

import httpx
import pytest

from genlayer_mcp.config import ServerConfig
from genlayer_mcp.docs_lookup import (
    DocsFetchError,
    extract_summary,
    extract_topic,
    fetch_latest_api_docs,
    make_httpx_fetcher,
)

SAMPLE_DOCS = """# GenLayer API

## Core Types
u256, bool, str and Address.

## Decorators
@gl.public.view marks read-only methods.

## Web Access
gl.nondet.web.render(url, mode="text") fetches a page.

## Events
Emit events from write methods.
"""


def _static_fetcher(text: str):
    async def fetch(url: str) -> str:
        return text
    return fetch


async def _failing_fetcher(url: str) -> str:
    raise DocsFetchError("connection refused")


class TestExtract:
    def test_summary_lists_headings(self):
        summary = extract_summary(SAMPLE_DOCS)
        assert summary.splitlines() == [
            "### Available Sections:",
            "- Core Types",
            "- Decorators",
            "- Web Access",
            "- Events",
        ]

    def test_summary_capped(self):
        docs = "\n".join(f"## Section {i}" for i in range(30))
        assert len(extract_summary(docs).splitlines()) == 16

    def test_topic_section(self):
        section = extract_topic(SAMPLE_DOCS, "types")
        assert section.startswith("## Core Types")
        assert "Decorators" not in section

    def test_unknown_topic(self):
        assert extract_topic(SAMPLE_DOCS, "quantum") is None

    def test_keyword_fallback(self):
        docs = "## Overview\nThe storage layer persists fields.\n"
        assert "storage layer" in extract_topic(docs, "storage")


class TestFetchLatestApiDocs:
    @pytest.mark.asyncio
    async def test_all(self):
        result = await fetch_latest_api_docs("all", fetcher=_static_fetcher(SAMPLE_DOCS))
        assert not result.is_error
        assert "## Quick Reference" in result.content
        assert "- Web Access" in result.content
        assert "(truncated for length)" not in result.content

    @pytest.mark.asyncio
    async def test_all_truncated(self):
        config = ServerConfig(max_docs_chars=20)
        result = await fetch_latest_api_docs("all", fetcher=_static_fetcher(SAMPLE_DOCS), config=config)
        assert "(truncated for length)" in result.content

    @pytest.mark.asyncio
    async def test_topic(self):
        result = await fetch_latest_api_docs("web_access", fetcher=_static_fetcher(SAMPLE_DOCS))
        assert not result.is_error
        assert result.content.startswith("# GenLayer API Documentation: WEB_ACCESS")
        assert "gl.nondet.web.render" in result.content

    @pytest.mark.asyncio
    async def test_unknown_topic_lists_topics(self):
        result = await fetch_latest_api_docs("quantum", fetcher=_static_fetcher(SAMPLE_DOCS))
        assert not result.is_error
        assert "Topic 'quantum' not found" in result.content
        assert "- evm_integration: EVM contract interfaces" in result.content

    @pytest.mark.asyncio
    async def test_fetch_failure(self):
        result = await fetch_latest_api_docs("all", fetcher=_failing_fetcher)
        assert result.is_error
        assert "connection refused" in result.content
        assert "https://docs.genlayer.com/" in result.content


class TestHttpxFetcher:
    @pytest.mark.asyncio
    async def test_success(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url == "https://docs.genlayer.com/api-references/genlayer-py"
            return httpx.Response(200, text=SAMPLE_DOCS)

        fetch = make_httpx_fetcher(transport=httpx.MockTransport(handler))
        result = await fetch_latest_api_docs("decorators", fetcher=fetch)
        assert not result.is_error
        assert "@gl.public.view" in result.content

    @pytest.mark.asyncio
    async def test_http_error(self):
        fetch = make_httpx_fetcher(transport=httpx.MockTransport(lambda r: httpx.Response(503)))
        with pytest.raises(DocsFetchError, match="503"):
            await fetch("https://docs.genlayer.com/")

    @pytest.mark.asyncio
    async def test_transport_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("no route", request=request)

        fetch = make_httpx_fetcher(transport=httpx.MockTransport(handler))
        result = await fetch_latest_api_docs("all", fetcher=fetch)
        assert result.is_error
        assert "no route" in result.content

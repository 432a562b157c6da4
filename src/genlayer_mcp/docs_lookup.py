"""Live GenLayer API reference lookup.

Fetches the published API reference page and either summarizes it or pulls
out the sections for one topic. Network access goes through a ``Fetcher``
so tests can inject canned pages.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone

import httpx

from genlayer_mcp.config import GENLAYER_GITHUB_URL, ServerConfig
from genlayer_mcp.schemas import ToolResult

logger = logging.getLogger(__name__)

Fetcher = Callable[[str], Awaitable[str]]

QUICK_REFERENCE_HEADINGS = 15


class DocsFetchError(Exception):
    """The API reference page could not be retrieved."""


def _section(pattern: str) -> re.Pattern[str]:
    return re.compile(pattern, re.IGNORECASE)


SECTION_PATTERNS: dict[str, list[re.Pattern[str]]] = {
    "types": [
        _section(r"## Core Types[\s\S]*?(?=##|\Z)"),
        _section(r"\*\*Primitive Types:\*\*[\s\S]*?(?=\*\*|##|\Z)"),
        _section(r"\*\*Collection Types:\*\*[\s\S]*?(?=\*\*|##|\Z)"),
        _section(r"\*\*Storage Structures:\*\*[\s\S]*?(?=\*\*|##|\Z)"),
        _section(r"\*\*Special Types:\*\*[\s\S]*?(?=\*\*|##|\Z)"),
    ],
    "decorators": [
        _section(r"## Decorators[\s\S]*?(?=##|\Z)"),
        _section(r"@gl\.public[\s\S]*?(?=@gl\.|##|\Z)"),
        _section(r"@gl\.private[\s\S]*?(?=@gl\.|##|\Z)"),
        _section(r"@gl\.contract_interface[\s\S]*?(?=@gl\.|##|\Z)"),
        _section(r"@gl\.allow_storage[\s\S]*?(?=@gl\.|##|\Z)"),
    ],
    "web_access": [
        _section(r"## Web Access[\s\S]*?(?=##|\Z)"),
        _section(r"gl\.nondet\.web[\s\S]*?(?=##|gl\.[^n]|\Z)"),
    ],
    "llm": [
        _section(r"## LLM/Prompt Execution[\s\S]*?(?=##|\Z)"),
        _section(r"gl\.nondet\.exec_prompt[\s\S]*?(?=##|\Z)"),
    ],
    "consensus": [
        _section(r"## Equivalence Principles[\s\S]*?(?=##|\Z)"),
        _section(r"## Non-Deterministic Operations[\s\S]*?(?=##|\Z)"),
        _section(r"gl\.eq_principle[\s\S]*?(?=##|\Z)"),
        _section(r"gl\.vm\.run_nondet[\s\S]*?(?=##|\Z)"),
    ],
    "storage": [
        _section(r"## Storage Patterns[\s\S]*?(?=##|\Z)"),
        _section(r"Root\.get\(\)[\s\S]*?(?=##|\Z)"),
        _section(r"Indirection\[[\s\S]*?(?=##|\Z)"),
    ],
    "events": [
        _section(r"## Events[\s\S]*?(?=##|\Z)"),
        _section(r"class.*Event[\s\S]*?(?=##|class|\Z)"),
    ],
    "contract_structure": [
        _section(r"## Contract Structure[\s\S]*?(?=##|\Z)"),
        _section(r"class.*gl\.Contract[\s\S]*?(?=##|\Z)"),
    ],
    "message_access": [
        _section(r"## Message Access[\s\S]*?(?=##|\Z)"),
        _section(r"gl\.message[\s\S]*?(?=##|\Z)"),
    ],
    "evm_integration": [
        _section(r"## EVM Integration[\s\S]*?(?=##|\Z)"),
        _section(r"@gl\.evm[\s\S]*?(?=##|\Z)"),
    ],
}

TOPIC_DESCRIPTIONS = {
    "types": "Primitive, collection, and storage types",
    "decorators": "Method and class decorators (@gl.public, @gl.private, etc.)",
    "web_access": "Web data fetching methods (gl.nondet.web.*)",
    "llm": "LLM/prompt execution (gl.nondet.exec_prompt)",
    "consensus": "Equivalence principles and non-deterministic operations",
    "storage": "Storage patterns and structures",
    "events": "Event emission and handling",
    "contract_structure": "Contract class structure and special methods",
    "message_access": "Transaction message access (gl.message)",
    "evm_integration": "EVM contract interfaces",
    "all": "Complete API documentation",
}


def make_httpx_fetcher(timeout: float = 30.0, transport: httpx.AsyncBaseTransport | None = None) -> Fetcher:
    """Build the default fetcher on top of httpx.AsyncClient."""

    async def fetch(url: str) -> str:
        try:
            async with httpx.AsyncClient(timeout=timeout, transport=transport, follow_redirects=True) as client:
                resp = await client.get(url)
                resp.raise_for_status()
                return resp.text
        except httpx.HTTPStatusError as e:
            raise DocsFetchError(f"Failed to fetch API documentation. Status: {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise DocsFetchError(str(e) or type(e).__name__) from e

    return fetch


def extract_summary(docs: str) -> str:
    headings = re.findall(r"^## (.+)$", docs, re.MULTILINE)
    if not headings:
        return ""
    lines = ["### Available Sections:"]
    lines.extend(f"- {h}" for h in headings[:QUICK_REFERENCE_HEADINGS])
    return "\n".join(lines)


def extract_topic(docs: str, topic: str) -> str | None:
    """Collect the sections matching a topic, or None when nothing matches."""
    patterns = SECTION_PATTERNS.get(topic.lower())
    if patterns is None:
        return None

    sections: list[str] = []
    for pattern in patterns:
        sections.extend(pattern.findall(docs))

    if not sections:
        keyword = re.compile(rf"[^#]*{re.escape(topic)}[^#]*(?=##|\Z)", re.IGNORECASE)
        sections.extend(keyword.findall(docs)[:5])

    if not sections:
        return None

    unique = list(dict.fromkeys(sections))
    return "\n\n---\n\n".join(unique).strip()


def _topics_listing() -> str:
    return "\n".join(f"- {name}: {desc}" for name, desc in TOPIC_DESCRIPTIONS.items())


def _fetched_footer(source: str) -> str:
    return f"---\nSource: {source}\nLast fetched: {datetime.now(timezone.utc).isoformat()}"


def format_full_docs(docs: str, source: str, max_chars: int) -> str:
    body = docs
    if len(docs) > max_chars:
        body = docs[:max_chars] + f"\n\n... (truncated for length)\n\nFull documentation available at: {source}"

    topics = ", ".join(t for t in SECTION_PATTERNS)
    return "\n".join([
        "# GenLayer API Documentation (Latest)",
        "",
        "## Quick Reference",
        "",
        extract_summary(docs),
        "",
        "## Full Documentation",
        "",
        body,
        "",
        _fetched_footer(source),
        "",
        "For topic-specific documentation, use the 'topic' parameter with one of:",
        topics,
    ])


async def fetch_latest_api_docs(
    topic: str = "all",
    fetcher: Fetcher | None = None,
    config: ServerConfig | None = None,
) -> ToolResult:
    """Fetch the API reference and render the requested slice of it."""
    config = config or ServerConfig()
    fetcher = fetcher or make_httpx_fetcher(config.request_timeout)
    source = config.api_docs_url

    try:
        docs = await fetcher(source)
    except DocsFetchError as e:
        logger.warning("API docs fetch failed: %s", e)
        return ToolResult(
            content="\n".join([
                f"Error fetching API documentation: {e}",
                "",
                "Fallback resources:",
                f"- GenLayer Documentation: {config.docs_url}",
                f"- GitHub Repository: {GENLAYER_GITHUB_URL}",
                f"- API Reference: {source}",
                "",
                "Please try again later.",
            ]),
            is_error=True,
        )

    if not topic or topic == "all":
        return ToolResult(content=format_full_docs(docs, source, config.max_docs_chars))

    section = extract_topic(docs, topic)
    if section is None:
        logger.debug("Topic %r not found in API docs", topic)
        return ToolResult(content="\n".join([
            f"Topic '{topic}' not found in the API documentation.",
            "",
            "Available topics:",
            _topics_listing(),
            "",
            f"API Reference URL: {source}",
        ]))

    return ToolResult(content="\n".join([
        f"# GenLayer API Documentation: {topic.upper()}",
        "",
        section,
        "",
        _fetched_footer(source),
        "",
        f"For complete documentation, visit: {config.docs_url}",
    ]))

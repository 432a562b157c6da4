"""Input screening for tool parameters, regex based.

URL and file-path checks can reject input. Code and text sanitizers never
reject: they return the cleaned value plus warnings, and warnings are shown
in tool reports without blocking generation.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Literal
from urllib.parse import urlsplit

logger = logging.getLogger(__name__)

PASCAL_CASE = re.compile(r"^[A-Z][a-zA-Z0-9]*$")
CAMEL_CASE = re.compile(r"^[a-z][a-zA-Z0-9]*$")
METHOD_NAME = re.compile(r"^[a-z][a-zA-Z0-9_]*$")
MARKET_NAME = re.compile(r"^[A-Z][a-zA-Z0-9]*Market$")

VALID_URL = re.compile(
    r"^https?://(www\.)?[-a-zA-Z0-9@:%._+~#=]{1,256}\.[a-zA-Z0-9()]{1,6}\b"
    r"([-a-zA-Z0-9()@:%_+.~#?&/=]*)$"
)

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")
_CONTROL_CHARS_KEEP_WHITESPACE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")

MALICIOUS_URL_PATTERNS = [
    re.compile(p, re.IGNORECASE)
    for p in (
        r"javascript:", r"data:", r"vbscript:", r"file:", r"ftp:",
        r"<script", r"onload=", r"onerror=",
    )
]

LOCAL_HOSTS = {"localhost", "127.0.0.1", "0.0.0.0", "::1"}

DANGEROUS_CODE_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"import\s+os", re.IGNORECASE), "Removed OS import (potentially dangerous)"),
    (re.compile(r"import\s+subprocess", re.IGNORECASE), "Removed subprocess import (potentially dangerous)"),
    (re.compile(r"import\s+sys", re.IGNORECASE), "Removed sys import (potentially dangerous)"),
    (re.compile(r"exec\s*\(", re.IGNORECASE), "Removed exec() call (potentially dangerous)"),
    (re.compile(r"eval\s*\(", re.IGNORECASE), "Removed eval() call (potentially dangerous)"),
    (re.compile(r"__import__\s*\(", re.IGNORECASE), "Removed __import__() call (potentially dangerous)"),
    (re.compile(r"open\s*\(", re.IGNORECASE), "Removed file open() call (potentially dangerous)"),
    (re.compile(r"file\s*\(", re.IGNORECASE), "Removed file() call (potentially dangerous)"),
]

SHELL_METACHARACTERS = [";", "|", "&", "$", "`", "$("]

SCRIPT_PATTERNS = [
    re.compile(p, re.IGNORECASE)
    for p in (r"<script", r"javascript:", r"onload=", r"onerror=", r"onclick=", r"onmouseover=")
]

SQL_PATTERNS = [
    re.compile(r"('|(\\'))+.*(--|#)", re.IGNORECASE),
    re.compile(r"\w*\s*((=)|(:))\s*('|(\\'))+((\s*((--)|(#)))|(('|(\\'))+))", re.IGNORECASE),
]

RESERVED_WORDS = {
    "eval", "exec", "import", "open", "file", "input", "raw_input",
    "compile", "__import__", "globals", "locals", "vars", "dir",
    "hasattr", "getattr", "setattr", "delattr", "callable",
}

TRAVERSAL_PATTERNS = [
    "../", "..\\", "/etc/", "/var/", "/tmp/", "/usr/", "/bin/", "/sbin/",
    "C:\\", "D:\\", "\\\\",
]

ALLOWED_CONTRACT_EXTENSIONS = (".py", ".gl", ".genlayer")

IdentifierKind = Literal["contract", "method", "variable"]


@dataclass
class CheckResult:
    """Outcome of a rejecting check."""
    is_valid: bool
    value: str = ""
    error: str = ""


@dataclass
class SanitizeResult:
    """Outcome of a non-rejecting sanitizer."""
    value: str
    warnings: list[str] = field(default_factory=list)


def validate_url(url: str, production: bool = False) -> CheckResult:
    """Accept only well-formed http(s) URLs free of script-ish payloads."""
    if not url or not isinstance(url, str):
        return CheckResult(False, error="URL must be a non-empty string")

    cleaned = _CONTROL_CHARS.sub("", url.strip())
    if not VALID_URL.match(cleaned):
        return CheckResult(False, error="Invalid URL format")

    try:
        parts = urlsplit(cleaned)
    except ValueError as e:
        return CheckResult(False, error=f"Invalid URL: {e}")

    if parts.scheme not in ("http", "https"):
        return CheckResult(False, error="Only HTTP and HTTPS protocols are allowed")

    for pattern in MALICIOUS_URL_PATTERNS:
        if pattern.search(cleaned):
            return CheckResult(False, error="URL contains potentially malicious content")

    if production and (parts.hostname or "") in LOCAL_HOSTS:
        return CheckResult(False, error="Localhost URLs not allowed in production")

    return CheckResult(True, value=cleaned)


def sanitize_contract_code(code: str) -> SanitizeResult:
    """Blank out dangerous imports/calls and flag shell metacharacters."""
    if not code or not isinstance(code, str):
        return SanitizeResult("", ["Empty or invalid code provided"])

    warnings: list[str] = []
    sanitized = code
    for pattern, warning in DANGEROUS_CODE_PATTERNS:
        if pattern.search(sanitized):
            sanitized = pattern.sub("# REMOVED FOR SECURITY", sanitized)
            warnings.append(warning)

    for meta in SHELL_METACHARACTERS:
        if meta in sanitized:
            warnings.append(f"Potential shell metacharacter detected: {meta}")

    if warnings:
        logger.debug("Contract code sanitizer raised %d warnings", len(warnings))
    return SanitizeResult(sanitized, warnings)


def validate_identifier(identifier: str, kind: IdentifierKind) -> CheckResult:
    """Check naming convention, length and reserved words for an identifier."""
    if not identifier or not isinstance(identifier, str):
        return CheckResult(False, error=f"{kind} name must be a non-empty string")

    trimmed = identifier.strip()
    if not trimmed:
        return CheckResult(False, error=f"{kind} name cannot be empty")
    if len(trimmed) > 100:
        return CheckResult(False, error=f"{kind} name too long (max 100 characters)")

    patterns = {"contract": PASCAL_CASE, "method": METHOD_NAME, "variable": CAMEL_CASE}
    pattern = patterns.get(kind)
    if pattern is None:
        return CheckResult(False, error="Unknown identifier type")
    if not pattern.match(trimmed):
        return CheckResult(False, error=f"{kind} name must follow proper naming convention")

    if trimmed.lower() in RESERVED_WORDS:
        return CheckResult(False, error=f"{kind} name cannot be a reserved or dangerous word")

    return CheckResult(True, value=trimmed)


def sanitize_text_input(text: str, max_length: int = 10000) -> SanitizeResult:
    """Truncate, strip control characters and flag script/SQL injection."""
    if not text or not isinstance(text, str):
        return SanitizeResult("", ["Empty or invalid input provided"])

    warnings: list[str] = []
    sanitized = text
    if len(sanitized) > max_length:
        sanitized = sanitized[:max_length]
        warnings.append(f"Input truncated to {max_length} characters")

    sanitized = _CONTROL_CHARS_KEEP_WHITESPACE.sub("", sanitized)

    if any(p.search(sanitized) for p in SCRIPT_PATTERNS):
        warnings.append("Potential script injection detected in input")
    if any(p.search(sanitized) for p in SQL_PATTERNS):
        warnings.append("Potential SQL injection pattern detected in input")

    return SanitizeResult(sanitized, warnings)


def validate_file_path(path: str) -> CheckResult:
    """Accept relative contract paths with a known extension."""
    if not path or not isinstance(path, str):
        return CheckResult(False, error="File path must be a non-empty string")

    trimmed = path.strip()
    for pattern in TRAVERSAL_PATTERNS:
        if pattern in trimmed:
            return CheckResult(False, error="File path contains dangerous directory traversal patterns")

    if not trimmed.startswith("contracts/") and not re.fullmatch(r"[a-zA-Z0-9_\-/.]+", trimmed):
        return CheckResult(
            False, error="File path must be in contracts/ directory with valid characters only",
        )

    if not trimmed.endswith(ALLOWED_CONTRACT_EXTENSIONS):
        return CheckResult(False, error="File must have a valid extension (.py, .gl, .genlayer)")

    return CheckResult(True, value=trimmed)

"""Site search tool restricted to an allowlist of domains."""

import html
import re
from typing import Any, Iterable
from urllib.parse import urljoin, urlparse

import httpx

from .base import Tool, ToolContext, ToolResult

DEFAULT_ALLOWED_DOMAINS = ("wikipedia.org", "cloudflare.com", "python.org")
ALLOWED_SCHEMES = {"http", "https"}
MAX_TEXT_LENGTH = 2000
MAX_BODY_BYTES = 1_000_000

_SCRIPT_STYLE_RE = re.compile(
    r"<(script|style|noscript)\b[^<>]*>.*?(?:</\1\s*>|\Z)", re.IGNORECASE | re.DOTALL
)
_COMMENT_RE = re.compile(r"<!--.*?(?:-->|\Z)", re.DOTALL)
_TAG_RE = re.compile(r"<[^<>]*>")
_WHITESPACE_RE = re.compile(r"\s+")


class DomainNotAllowedError(Exception):
    """The URL points outside the allowlist."""


def normalize_domains(domains: Iterable[str]) -> tuple[str, ...]:
    """Lowercase domains and strip leading/trailing dots."""
    normalized = []
    for domain in domains:
        domain = domain.strip().strip(".").lower()
        if domain:
            normalized.append(domain)
    return tuple(normalized)


def is_host_allowed(hostname: str, allowed_domains: Iterable[str]) -> bool:
    """Check a hostname equals, or is a subdomain of, an allowed domain."""
    host = hostname.strip().rstrip(".").lower()
    if not host:
        return False
    for domain in allowed_domains:
        if host == domain or host.endswith("." + domain):
            return True
    return False


def validate_url(url: str, allowed_domains: Iterable[str]) -> str:
    """Validate a URL against scheme and domain policy.

    The check runs on the hostname urlparse resolves, so userinfo
    (`https://wikipedia.org@evil.com/`), ports and paths cannot smuggle
    an allowed name past it.

    Returns:
        The validated hostname.

    Raises:
        DomainNotAllowedError: If the URL is malformed or not allowed.
    """
    try:
        parsed = urlparse(url.strip())
        hostname = parsed.hostname
    except ValueError as e:
        raise DomainNotAllowedError(f"Invalid URL: {e}") from e

    if parsed.scheme.lower() not in ALLOWED_SCHEMES:
        raise DomainNotAllowedError(
            f"Scheme not allowed: {parsed.scheme or '(none)'}. Use http or https."
        )

    if not hostname:
        raise DomainNotAllowedError("URL must have a hostname")

    allowed = tuple(allowed_domains)
    if not is_host_allowed(hostname, allowed):
        raise DomainNotAllowedError(
            f"Domain not allowed: {hostname}. Allowed domains: {', '.join(allowed)}"
        )

    return hostname


def extract_text(markup: str, max_length: int = MAX_TEXT_LENGTH) -> str:
    """Strip tags from HTML, collapse whitespace and truncate."""
    text = _SCRIPT_STYLE_RE.sub(" ", markup)
    text = _COMMENT_RE.sub(" ", text)
    text = _TAG_RE.sub(" ", text)
    text = html.unescape(text)
    text = _WHITESPACE_RE.sub(" ", text).strip()
    return text[:max_length]


class SearchSiteTool(Tool):
    """Fetch a page from an allowlisted site and return its plain text."""

    def __init__(
        self,
        allowed_domains: Iterable[str] = DEFAULT_ALLOWED_DOMAINS,
        timeout: float = 10.0,
        max_length: int = MAX_TEXT_LENGTH,
        max_redirects: int = 5,
        max_bytes: int = MAX_BODY_BYTES,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.allowed_domains = normalize_domains(allowed_domains)
        self._timeout = timeout
        self._max_length = max_length
        self._max_redirects = max_redirects
        self._max_bytes = max_bytes
        self._transport = transport

    @property
    def name(self) -> str:
        return "searchSite"

    @property
    def description(self) -> str:
        return (
            "Fetch a web page and return its text content. "
            f"Only these sites (and their subdomains) are allowed: {', '.join(self.allowed_domains)}."
        )

    @property
    def parameters(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "url": {
                    "type": "string",
                    "description": "Full http(s) URL of the page to read",
                },
            },
            "required": ["url"],
        }

    async def _fetch(self, url: str) -> httpx.Response:
        """GET a URL, following redirects only while they stay on the allowlist."""
        async with httpx.AsyncClient(
            timeout=self._timeout,
            follow_redirects=False,
            transport=self._transport,
        ) as client:
            current = url
            for _ in range(self._max_redirects + 1):
                response = await client.get(current)
                if not response.is_redirect:
                    return response
                location = response.headers.get("location", "")
                current = urljoin(str(response.url), location)
                validate_url(current, self.allowed_domains)
            raise httpx.TooManyRedirects(
                f"Exceeded {self._max_redirects} redirects", request=response.request
            )

    async def execute(self, context: ToolContext, url: str = "", **kwargs: Any) -> ToolResult:
        try:
            hostname = validate_url(url, self.allowed_domains)
        except DomainNotAllowedError as e:
            return ToolResult(success=False, error=str(e))

        try:
            response = await self._fetch(url)
        except DomainNotAllowedError as e:
            return ToolResult(success=False, error=f"Redirect blocked: {e}")
        except httpx.TimeoutException:
            return ToolResult(success=False, error=f"Request timed out after {self._timeout}s")
        except httpx.TooManyRedirects:
            return ToolResult(
                success=False, error=f"Too many redirects (max {self._max_redirects})"
            )
        except httpx.RequestError as e:
            return ToolResult(success=False, error=f"Request failed: {e}")

        if not response.is_success:
            return ToolResult(
                success=False,
                error=f"HTTP {response.status_code} fetching {url}",
                metadata={"status_code": response.status_code},
            )

        body = response.text
        truncated = len(body) > self._max_bytes
        text = extract_text(body[: self._max_bytes], self._max_length)
        return ToolResult(
            success=True,
            output=text,
            metadata={
                "host": hostname,
                "status_code": response.status_code,
                "truncated": truncated,
            },
        )

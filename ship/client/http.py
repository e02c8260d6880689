"""HTTP transport for provider and webhook calls.

This module provides:
- HttpClient: Protocol for HTTP operations (injectable for tests)
- RealHttpClient: Real implementation using urllib
- MockHttpClient: Scripted implementation for testing
"""

from __future__ import annotations

import json
import ssl
import urllib.error
import urllib.request
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from ship.core.result import Err, Ok, Result
from ship.core.structured import as_str_dict, get_str

__all__ = [
    "HttpClient",
    "HttpError",
    "HttpResponse",
    "MockCall",
    "MockHttpClient",
    "RealHttpClient",
    "HTTP_TIMEOUT_SECONDS",
]

HTTP_TIMEOUT_SECONDS = 60.0

REQUEST_ID_HEADER = "X-GitHub-Request-Id"


@dataclass(frozen=True, slots=True)
class HttpError:
    """HTTP error details.

    Attributes:
        url: The URL that failed
        status: HTTP status code (0 when no response was received)
        message: Human-readable error message
        request_id: Provider request id, when the provider sent one
        cancelled: True when the call was refused because the run was cancelled
    """

    url: str
    status: int
    message: str
    request_id: str | None = None
    cancelled: bool = False

    def __str__(self) -> str:
        if self.status:
            return f"HTTP {self.status}: {self.message} ({self.url})"
        return f"{self.message} ({self.url})"


def _empty_headers() -> dict[str, str]:
    return {}


@dataclass(frozen=True, slots=True)
class HttpResponse:
    status: int
    headers: Mapping[str, str] = field(default_factory=_empty_headers)
    body: bytes = b""

    def header(self, name: str) -> str | None:
        """Case-insensitive header lookup."""
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return None

    @property
    def request_id(self) -> str | None:
        return self.header(REQUEST_ID_HEADER)

    def json(self) -> object:
        """Decode the body as JSON (``None`` for an empty body).

        Raises:
            ValueError: If the body is not valid UTF-8 JSON.
        """
        if not self.body:
            return None
        return json.loads(self.body.decode("utf-8"))


@runtime_checkable
class HttpClient(Protocol):
    """Protocol for HTTP operations.

    Implementations never raise for transport or status failures; any
    non-2xx response comes back as ``Err(HttpError)`` with its status.
    """

    def request(
        self,
        method: str,
        url: str,
        *,
        body: bytes | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> Result[HttpResponse, HttpError]: ...


def _error_message(raw: bytes, fallback: str) -> str:
    # GitHub and Discord both put a human readable "message" in error bodies.
    try:
        data = as_str_dict(json.loads(raw.decode("utf-8")))
    except (json.JSONDecodeError, UnicodeDecodeError):
        return fallback
    if data is None:
        return fallback
    return get_str(data, "message") or fallback


class RealHttpClient:
    """Real HTTP client using urllib.

    Handles:
    - HTTPS with system certificates, or no verification when asked to
    - Provider error messages and request ids on failures
    - Timeout handling
    """

    def __init__(
        self,
        timeout: float = HTTP_TIMEOUT_SECONDS,
        user_agent: str = "ship-release",
        verify_tls: bool = True,
    ) -> None:
        self.timeout = timeout
        self.user_agent = user_agent
        if verify_tls:
            self._ssl_context = ssl.create_default_context()
        else:
            self._ssl_context = ssl._create_unverified_context()  # noqa: S323

    def request(
        self,
        method: str,
        url: str,
        *,
        body: bytes | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> Result[HttpResponse, HttpError]:
        all_headers = {"User-Agent": self.user_agent}
        all_headers.update(headers or {})
        try:
            req = urllib.request.Request(url, data=body, headers=all_headers, method=method)
            with urllib.request.urlopen(
                req,
                timeout=self.timeout,
                context=self._ssl_context,
            ) as response:
                return Ok(
                    HttpResponse(
                        status=response.status,
                        headers=dict(response.headers.items()),
                        body=response.read(),
                    )
                )
        except urllib.error.HTTPError as e:
            raw = e.read() if e.fp is not None else b""
            return Err(
                HttpError(
                    url=url,
                    status=e.code,
                    message=_error_message(raw, str(e.reason)),
                    request_id=e.headers.get(REQUEST_ID_HEADER) if e.headers else None,
                )
            )
        except urllib.error.URLError as e:
            return Err(HttpError(url=url, status=0, message=str(e.reason)))
        except TimeoutError:
            return Err(HttpError(url=url, status=0, message="Request timed out"))
        except ValueError as e:
            return Err(HttpError(url=url, status=0, message=str(e)))
        except OSError as e:
            return Err(HttpError(url=url, status=0, message=str(e)))


@dataclass(frozen=True, slots=True)
class MockCall:
    method: str
    url: str
    body: bytes | None
    headers: Mapping[str, str]

    def json(self) -> object:
        if self.body is None:
            return None
        return json.loads(self.body.decode("utf-8"))


class MockHttpClient:
    """Mock HTTP client for testing.

    Responses are queued per (method, url). Each call pops the next queued
    response; the last one is repeated for further calls.

    Usage:
        client = MockHttpClient()
        client.add("GET", "https://api.example.com/data", HttpResponse(200, body=b"{}"))
        client.add_json("GET", "https://api.example.com/x", {"key": "value"})
    """

    def __init__(self) -> None:
        self._responses: dict[tuple[str, str], list[HttpResponse | HttpError]] = {}
        self.calls: list[MockCall] = []

    def add(self, method: str, url: str, response: HttpResponse | HttpError) -> None:
        self._responses.setdefault((method, url), []).append(response)

    def add_json(
        self,
        method: str,
        url: str,
        payload: object,
        *,
        status: int = 200,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        body = json.dumps(payload).encode("utf-8")
        self.add(method, url, HttpResponse(status=status, headers=dict(headers or {}), body=body))

    def request(
        self,
        method: str,
        url: str,
        *,
        body: bytes | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> Result[HttpResponse, HttpError]:
        self.calls.append(MockCall(method=method, url=url, body=body, headers=dict(headers or {})))

        queue = self._responses.get((method, url))
        if not queue:
            return Err(HttpError(url=url, status=404, message="Not Found (mock)"))

        response = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(response, HttpError):
            return Err(response)
        return Ok(response)

    def calls_to(self, method: str) -> list[MockCall]:
        return [c for c in self.calls if c.method == method]

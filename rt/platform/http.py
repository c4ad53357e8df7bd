"""HTTP client abstraction.

- HttpClient: protocol for the one call the tool makes (POST JSON)
- RealHttpClient: urllib implementation
- MockHttpClient: records requests and replays canned responses in tests
"""

from __future__ import annotations

import json
import ssl
import urllib.error
import urllib.request
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from rt import __version__
from rt.core.result import Err, Ok, Result

__all__ = [
    "HttpClient",
    "HttpError",
    "MockHttpClient",
    "RealHttpClient",
]


@dataclass(frozen=True, slots=True)
class HttpError:
    """HTTP error details.

    Attributes:
        url: The URL that failed
        status: HTTP status code (0 for network errors)
        message: Human-readable error message
        body: Response body, when the server sent one
    """

    url: str
    status: int
    message: str
    body: str = ""

    def __str__(self) -> str:
        if self.status:
            return f"HTTP {self.status}: {self.message} ({self.url})"
        return f"{self.message} ({self.url})"


@runtime_checkable
class HttpClient(Protocol):
    def post_json(
        self,
        url: str,
        payload: Mapping[str, object],
        headers: Mapping[str, str],
    ) -> Result[str, HttpError]:
        """POST ``payload`` as JSON and return the response body as text."""
        ...


class RealHttpClient:
    """HTTP client using urllib with system certificates."""

    def __init__(
        self,
        timeout: float = 30.0,
        user_agent: str = f"release-tool/{__version__}",
    ) -> None:
        self.timeout = timeout
        self.user_agent = user_agent
        self._ssl_context = ssl.create_default_context()

    def post_json(
        self,
        url: str,
        payload: Mapping[str, object],
        headers: Mapping[str, str],
    ) -> Result[str, HttpError]:
        data = json.dumps(payload).encode("utf-8")
        req = urllib.request.Request(
            url,
            data=data,
            method="POST",
            headers={"User-Agent": self.user_agent, **headers},
        )
        try:
            with urllib.request.urlopen(
                req,
                timeout=self.timeout,
                context=self._ssl_context,
            ) as response:
                raw: bytes = response.read()
        except urllib.error.HTTPError as e:
            body = e.read().decode("utf-8", errors="replace") if e.fp is not None else ""
            return Err(HttpError(url=url, status=e.code, message=str(e.reason), body=body))
        except urllib.error.URLError as e:
            return Err(HttpError(url=url, status=0, message=str(e.reason)))
        except TimeoutError:
            return Err(HttpError(url=url, status=0, message="Request timed out"))
        except (ValueError, OSError) as e:
            return Err(HttpError(url=url, status=0, message=str(e)))

        return Ok(raw.decode("utf-8", errors="replace"))


@dataclass(frozen=True, slots=True)
class RecordedRequest:
    url: str
    payload: Mapping[str, object]
    headers: Mapping[str, str]


class MockHttpClient:
    """Mock HTTP client for tests.

    Usage:
        client = MockHttpClient()
        client.set_response("https://api.example.com/x", '{"ok": true}')
        result = client.post_json("https://api.example.com/x", {}, {})
    """

    def __init__(self) -> None:
        self._responses: dict[str, str | HttpError] = {}
        self.requests: list[RecordedRequest] = []

    def set_response(self, url: str, response: str | HttpError) -> None:
        self._responses[url] = response

    def post_json(
        self,
        url: str,
        payload: Mapping[str, object],
        headers: Mapping[str, str],
    ) -> Result[str, HttpError]:
        self.requests.append(RecordedRequest(url=url, payload=payload, headers=dict(headers)))

        if url not in self._responses:
            return Err(HttpError(url=url, status=404, message="Not found (mock)"))
        response = self._responses[url]
        if isinstance(response, HttpError):
            return Err(response)
        return Ok(response)

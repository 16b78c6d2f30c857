# File: furniture_ocr/client/api.py

"""
HTTP client for the Furniture OCR API.

Every non-2xx answer is raised as ``RelayError`` carrying the server's
``kind``/``message``; network failures become kind ``unavailable``.
No retries and no timeout: a call either returns or raises.
"""

import logging
from typing import Any, Optional

import httpx

logger = logging.getLogger(__name__)


class RelayError(Exception):
    def __init__(self, kind: str, message: str, status_code: Optional[int] = None):
        super().__init__(f"{kind}: {message}")
        self.kind = kind
        self.message = message
        self.status_code = status_code

    @classmethod
    def from_response(cls, response: httpx.Response) -> "RelayError":
        try:
            body = response.json()
        except ValueError:
            body = None

        if isinstance(body, dict) and "kind" in body:
            return cls(body["kind"], str(body.get("message", "")), response.status_code)
        if isinstance(body, dict) and "detail" in body:
            return cls(f"http-{response.status_code}", str(body["detail"]), response.status_code)
        return cls(f"http-{response.status_code}", response.text or response.reason_phrase, response.status_code)


class ApiClient:
    def __init__(self, http: httpx.Client, api_prefix: str = "/api/v1"):
        self.http = http
        self.api_prefix = api_prefix
        self.token: Optional[str] = None

    @classmethod
    def connect(cls, base_url: str, api_prefix: str = "/api/v1") -> "ApiClient":
        return cls(httpx.Client(base_url=base_url, timeout=None), api_prefix)

    def request(
        self,
        method: str,
        path: str,
        *,
        absolute: bool = False,
        authenticated: bool = True,
        **kwargs: Any,
    ) -> httpx.Response:
        url = path if absolute else f"{self.api_prefix}{path}"
        headers = dict(kwargs.pop("headers", None) or {})
        if authenticated and self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        try:
            response = self.http.request(method, url, headers=headers, **kwargs)
        except httpx.HTTPError as exc:
            logger.error("%s %s failed: %s", method, url, exc)
            raise RelayError("unavailable", str(exc)) from exc

        if response.is_error:
            raise RelayError.from_response(response)
        return response

    def get(self, path: str, **kwargs: Any) -> httpx.Response:
        return self.request("GET", path, **kwargs)

    def post(self, path: str, **kwargs: Any) -> httpx.Response:
        return self.request("POST", path, **kwargs)

    def patch(self, path: str, **kwargs: Any) -> httpx.Response:
        return self.request("PATCH", path, **kwargs)

    def delete(self, path: str, **kwargs: Any) -> httpx.Response:
        return self.request("DELETE", path, **kwargs)

    def close(self) -> None:
        self.http.close()

"""
HTTP transport for the todo client.

The API client only needs request(method, path, params, body) returning an
ApiResponse; UrllibTransport is the real implementation and keeps the
session cookie between calls.
"""
from __future__ import annotations

import json
import urllib.error
import urllib.parse
import urllib.request
from dataclasses import dataclass
from http.cookiejar import CookieJar
from typing import Any, Optional, Protocol


@dataclass(frozen=True)
class ApiResponse:
    status: int
    data: Any = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class Transport(Protocol):
    def request(
        self,
        method: str,
        path: str,
        params: Optional[dict] = None,
        body: Optional[Any] = None,
    ) -> ApiResponse:
        ...


def encode_query(params: Optional[dict]) -> str:
    """Drop None values; booleans become "true"/"false"."""
    if not params:
        return ''
    cleaned = {}
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, bool):
            value = 'true' if value else 'false'
        cleaned[key] = value
    return urllib.parse.urlencode(cleaned)


def _decode(raw: bytes) -> Any:
    if not raw:
        return None
    try:
        return json.loads(raw.decode('utf-8'))
    except (UnicodeDecodeError, json.JSONDecodeError):
        return {'error': raw.decode('utf-8', errors='replace')}


class UrllibTransport:
    """JSON over urllib with a cookie jar for the session cookie."""

    def __init__(self, base_url: str, timeout: float = 10.0):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.cookies = CookieJar()
        self._opener = urllib.request.build_opener(urllib.request.HTTPCookieProcessor(self.cookies))

    def request(
        self,
        method: str,
        path: str,
        params: Optional[dict] = None,
        body: Optional[Any] = None,
    ) -> ApiResponse:
        url = f"{self.base_url}{path}"
        query = encode_query(params)
        if query:
            url = f"{url}?{query}"

        data = None
        headers = {'Accept': 'application/json'}
        if body is not None:
            data = json.dumps(body).encode('utf-8')
            headers['Content-Type'] = 'application/json'

        req = urllib.request.Request(url, data=data, headers=headers, method=method)
        try:
            with self._opener.open(req, timeout=self.timeout) as resp:
                return ApiResponse(status=resp.status, data=_decode(resp.read()))
        except urllib.error.HTTPError as e:
            return ApiResponse(status=e.code, data=_decode(e.read()))

"""
Transport settings handed to the kernel-services client.
"""
from dataclasses import dataclass, field
from typing import Dict, Optional

DEFAULT_BASE_URL = "http://localhost:8888/"


def url_path_join(*pieces: str) -> str:
    """Join URL components with single slashes, keeping outer slashes."""
    pieces = [p for p in pieces if p]
    if not pieces:
        return ""
    initial = pieces[0].startswith('/')
    final = pieces[-1].endswith('/')
    stripped = [s.strip('/') for s in pieces]
    result = '/'.join(s for s in stripped if s)
    if initial:
        result = '/' + result
    if final and not result.endswith('/'):
        result = result + '/'
    return result


def derive_ws_url(base_url: str) -> str:
    """Swap the first "http" in ``base_url`` for "ws"; https becomes wss."""
    return base_url.replace("http", "ws", 1)


@dataclass(frozen=True)
class RequestInit:
    """Caching and credential policy applied to every request."""

    cache: str = "default"
    credentials: str = "same-origin"


@dataclass(frozen=True)
class ServerSettings:
    """Resolved transport parameters for one Jupyter server."""

    base_url: str
    ws_url: str
    token: Optional[str] = None
    page_url: str = ""
    init: RequestInit = field(default_factory=RequestInit)
    request_headers: Dict[str, str] = field(default_factory=dict)
    verify: bool = True
    timeout: float = 30.0

    def headers(self) -> Dict[str, str]:
        """Headers for REST and WebSocket requests."""
        headers = dict(self.request_headers)
        if self.token:
            headers['Authorization'] = f'token {self.token}'
        if self.init.cache == 'no-store':
            headers['Cache-Control'] = 'no-store'
        return headers

    def api_url(self, *parts: str) -> str:
        return url_path_join(self.base_url, 'api', *parts)

    def ws_api_url(self, *parts: str) -> str:
        return url_path_join(self.ws_url, 'api', *parts)


def make_settings(
    base_url: Optional[str] = None,
    ws_url: Optional[str] = None,
    token: Optional[str] = None,
    page_url: str = "",
    init: Optional[RequestInit] = None,
    request_headers: Optional[Dict[str, str]] = None,
    verify: bool = True,
    timeout: float = 30.0,
) -> ServerSettings:
    """Build server settings, filling unspecified values with defaults.

    Without an explicit ``ws_url`` the WebSocket URL comes from derive_ws_url.
    """
    base_url = base_url or DEFAULT_BASE_URL
    if ws_url is None:
        ws_url = derive_ws_url(base_url)
    return ServerSettings(
        base_url=base_url,
        ws_url=ws_url,
        token=token,
        page_url=page_url,
        init=init or RequestInit(),
        request_headers=dict(request_headers or {}),
        verify=verify,
        timeout=timeout,
    )

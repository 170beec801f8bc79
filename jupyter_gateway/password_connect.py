"""
Cookie-based login for password protected Jupyter servers.
"""

import asyncio
from dataclasses import dataclass
from typing import Callable, Dict, Optional

import requests

from gateway_core.logging import LoggerMixin
from .server_settings import url_path_join

SESSION_COOKIE_PREFIX = "username-"
XSRF_COOKIE = "_xsrf"

# Given the server URL, return a password or None to abort
PasswordProvider = Callable[[str], Optional[str]]


@dataclass(frozen=True)
class PasswordConnectionInfo:
    xsrf_cookie: str
    session_cookie_name: str = ""
    session_cookie_value: str = ""
    empty_password: bool = False

    def request_headers(self) -> Dict[str, str]:
        """Headers that authenticate REST and WebSocket requests."""
        if self.empty_password:
            return {}
        cookie = f"{XSRF_COOKIE}={self.xsrf_cookie}; {self.session_cookie_name}={self.session_cookie_value}"
        return {'Cookie': cookie, 'X-XSRFToken': self.xsrf_cookie}


class JupyterPasswordConnect(LoggerMixin):
    """Logs into a Jupyter server's ``/login`` form and keeps the cookies."""

    def __init__(self, password_provider: Optional[PasswordProvider] = None, timeout: float = 30.0):
        super().__init__()
        self.password_provider = password_provider
        self.timeout = timeout
        self._cache: Dict[str, PasswordConnectionInfo] = {}

    async def get_password_connection_info(self, url: str, allow_unauthorized: bool = False) -> Optional[PasswordConnectionInfo]:
        """Resolve login cookies for ``url``; None when login is not possible."""
        url = url if url.endswith('/') else url + '/'
        cached = self._cache.get(url)
        if cached is not None:
            return cached

        info = await asyncio.to_thread(self._login, url, not allow_unauthorized)
        if info is not None:
            self._cache[url] = info
        return info

    def clear(self, url: Optional[str] = None) -> None:
        if url is None:
            self._cache.clear()
        else:
            self._cache.pop(url if url.endswith('/') else url + '/', None)

    def _login(self, url: str, verify: bool) -> Optional[PasswordConnectionInfo]:
        xsrf = self._get_xsrf_token(url, verify)
        if not xsrf:
            self.log_warning(f"⚠️ [PasswordConnect] No XSRF cookie from server", {"url": url})
            return None

        # Servers without a password hand out a session cookie for an empty one
        cookie = self._get_session_cookie(url, xsrf, "", verify)
        if cookie is not None:
            self.log_info(f"🔑 [PasswordConnect] Server accepts an empty password", {"url": url})
            return PasswordConnectionInfo(xsrf_cookie=xsrf, session_cookie_name=cookie[0],
                                          session_cookie_value=cookie[1], empty_password=True)

        if self.password_provider is None:
            return None
        password = self.password_provider(url)
        if password is None:
            self.log_info(f"🔑 [PasswordConnect] Password prompt dismissed", {"url": url})
            return None

        cookie = self._get_session_cookie(url, xsrf, password, verify)
        if cookie is None:
            self.log_warning(f"❌ [PasswordConnect] Login rejected", {"url": url})
            return None
        return PasswordConnectionInfo(xsrf_cookie=xsrf, session_cookie_name=cookie[0],
                                      session_cookie_value=cookie[1])

    def _get_xsrf_token(self, url: str, verify: bool) -> Optional[str]:
        response = requests.get(
            url_path_join(url, 'login?'),
            allow_redirects=False,
            verify=verify,
            timeout=self.timeout
        )
        if response.ok:
            return response.cookies.get(XSRF_COOKIE)
        return None

    def _get_session_cookie(self, url: str, xsrf: str, password: str, verify: bool):
        response = requests.post(
            url_path_join(url, 'login?'),
            data={XSRF_COOKIE: xsrf, 'password': password},
            headers={'Cookie': f"{XSRF_COOKIE}={xsrf}", 'X-XSRFToken': xsrf},
            allow_redirects=False,
            verify=verify,
            timeout=self.timeout
        )
        # A successful login answers with a redirect carrying the session cookie
        if response.status_code != 302:
            return None
        for name, value in response.cookies.items():
            if name.startswith(SESSION_COOKIE_PREFIX):
                return name, value
        return None

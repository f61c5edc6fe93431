"""HTTP transport for catalog pages and poster assets."""

from __future__ import annotations

import logging
import shutil
import tempfile
from pathlib import Path
from typing import Dict, Optional, Protocol
from urllib.parse import quote, urlsplit, urlunsplit

from curl_cffi import requests
from curl_cffi.requests import RequestsError

from .config import Settings, settings as default_settings
from .errors import NetworkError

try:
    import certifi
except ImportError:  # pragma: no cover - certifi is always installed in our env
    certifi = None

logger = logging.getLogger(__name__)


def _ensure_ascii_cert_path() -> Optional[str]:
    """Ensure CA bundle lives on an ASCII path (curl can't open non-ASCII)."""
    if certifi is None:
        return None

    try:
        original = Path(certifi.where())
    except OSError as exc:  # pragma: no cover
        logger.warning("Failed to locate certifi bundle: %s", exc)
        return None

    try:
        str(original).encode("ascii")
        return str(original)
    except UnicodeEncodeError:
        ascii_copy = Path(tempfile.gettempdir()) / "certifi_cacert.pem"
        try:
            if not ascii_copy.exists() or original.stat().st_mtime > ascii_copy.stat().st_mtime:
                shutil.copy2(original, ascii_copy)
            return str(ascii_copy)
        except OSError as exc:
            logger.warning("Failed to copy certifi bundle to ASCII path: %s", exc)
            return None


CERT_BUNDLE_PATH = _ensure_ascii_cert_path()


def encode_url(url: str) -> str:
    """Percent-encode non-ASCII characters in the path and query."""
    parts = urlsplit(url)
    encoded_path = quote(parts.path, safe="/%")
    encoded_query = quote(parts.query, safe="=&%+")
    return urlunsplit((parts.scheme, parts.netloc, encoded_path, encoded_query, parts.fragment))


class Transport(Protocol):
    """Anything that can turn a URL into response bytes."""

    async def fetch(self, url: str) -> bytes:
        """Return the body for ``url`` or raise :class:`NetworkError`."""
        ...


class HttpTransport:
    """curl_cffi-backed transport impersonating a desktop browser."""

    def __init__(
        self,
        config: Optional[Settings] = None,
        cookies: Optional[Dict[str, str]] = None,
        proxy: Optional[str] = None,
    ) -> None:
        self.config = config or default_settings
        self.cookies = cookies or {}
        self.proxy = proxy
        self._cert_bundle = CERT_BUNDLE_PATH
        self._session: Optional[requests.AsyncSession] = None

    async def __aenter__(self) -> "HttpTransport":
        self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._session is not None:
            await self._session.close()
            self._session = None
            logger.debug("HTTP session closed")

    def _ensure_session(self) -> requests.AsyncSession:
        if self._session is None:
            proxies = {"http": self.proxy, "https": self.proxy} if self.proxy else None
            self._session = requests.AsyncSession(
                headers={
                    "User-Agent": self.config.user_agent,
                    "Upgrade-Insecure-Requests": "1",
                },
                cookies=self.cookies,
                proxies=proxies,
                timeout=self.config.timeout,
                impersonate=self.config.impersonate,
            )
        return self._session

    async def fetch(self, url: str) -> bytes:
        encoded_url = encode_url(url)
        session = self._ensure_session()
        verify_arg: bool | str = self._cert_bundle or True
        headers = {"Referer": self.config.base_url}

        try:
            response = await self._get(session, encoded_url, headers, verify_arg)
        except RequestsError as exc:
            message = str(exc).lower()
            if "certificate" in message and "verify" in message and verify_arg is not False:
                logger.warning("TLS verification failed for %s (likely non-ASCII CA path). Retrying insecurely.", url)
                try:
                    response = await self._get(session, encoded_url, headers, False)
                except RequestsError as retry_exc:
                    raise NetworkError(str(retry_exc), url) from retry_exc
            else:
                raise NetworkError(str(exc), url) from exc

        if response.status_code >= 400:
            logger.info("HTTP %s for %s", response.status_code, url)
            raise NetworkError(f"HTTP {response.status_code}", url, status=response.status_code)

        logger.debug("Fetched %s (%d bytes)", url, len(response.content))
        return response.content

    @staticmethod
    async def _get(session: requests.AsyncSession, url: str, headers: Dict[str, str], verify):
        return await session.get(url, headers=headers, allow_redirects=True, verify=verify)

"""
Backend API client
Thin requests wrapper around the external finance backend
"""
import logging
from dataclasses import dataclass
from typing import Any, Iterator, Optional

import requests
from flask import current_app
from werkzeug.http import parse_options_header

logger = logging.getLogger(__name__)


class BackendError(Exception):
    """Raised when a backend call fails

    status_code is None for transport failures (connection refused, timeout).
    detail carries the backend's own error text when it sent one.
    """

    def __init__(self, status_code: Optional[int], message: str, detail: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail

    @property
    def http_status(self) -> int:
        """Status the portal should answer with for this failure"""
        if self.status_code is None:
            return 503
        if 400 <= self.status_code < 500:
            return self.status_code
        return 502


@dataclass
class DownloadedFile:
    content: bytes
    filename: str
    content_type: str = 'application/octet-stream'


def error_message(exc: Exception, fallback: str) -> str:
    """Human readable error text: backend detail, then exception message, then fallback"""
    detail = getattr(exc, 'detail', None)
    if detail:
        return detail
    message = str(exc)
    return message or fallback


def extract_filename(content_disposition: Optional[str]) -> Optional[str]:
    """Pull the filename out of a Content-Disposition header

    Handles quoted, bare and RFC 2231 (filename*=utf-8''...) forms.
    """
    if not content_disposition:
        return None
    _, options = parse_options_header(content_disposition)
    filename = (options.get('filename') or '').strip()
    return filename or None


def _response_detail(response) -> Optional[str]:
    try:
        body = response.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None
    detail = body.get('detail') or body.get('error') or body.get('message')
    if detail is None:
        return None
    if isinstance(detail, list):
        # FastAPI validation errors
        return '; '.join(str(item.get('msg', item)) if isinstance(item, dict) else str(item)
                         for item in detail)
    return str(detail)


class BackendClient:
    """HTTP client for the finance backend"""

    def __init__(self, base_url: str, timeout: float = 300):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = requests.Session()

    def _url(self, path: str) -> str:
        if path.startswith('http://') or path.startswith('https://'):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"

    def request(self, method: str, path: str, **kwargs) -> requests.Response:
        """Send a request and raise BackendError on failure"""
        kwargs.setdefault('timeout', self.timeout)
        url = self._url(path)
        try:
            response = self.session.request(method, url, **kwargs)
        except requests.exceptions.RequestException as e:
            logger.error("Backend %s %s failed: %s", method, url, e)
            raise BackendError(None, f'Backend not reachable: {e}') from e

        if not response.ok:
            detail = _response_detail(response)
            logger.warning("Backend %s %s returned HTTP %s: %s",
                           method, url, response.status_code, detail)
            raise BackendError(response.status_code, f'HTTP {response.status_code}', detail)
        return response

    def _json(self, response) -> Any:
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise BackendError(response.status_code, 'Backend returned invalid JSON') from e

    def get(self, path: str, **kwargs) -> Any:
        return self._json(self.request('GET', path, **kwargs))

    def post(self, path: str, **kwargs) -> Any:
        return self._json(self.request('POST', path, **kwargs))

    def put(self, path: str, **kwargs) -> Any:
        return self._json(self.request('PUT', path, **kwargs))

    def delete(self, path: str, **kwargs) -> Any:
        return self._json(self.request('DELETE', path, **kwargs))

    def download(self, path: str, default_filename: str, method: str = 'GET', **kwargs) -> DownloadedFile:
        """Fetch a binary result and the filename the backend suggests"""
        response = self.request(method, path, **kwargs)
        filename = extract_filename(response.headers.get('Content-Disposition')) or default_filename
        return DownloadedFile(
            content=response.content,
            filename=filename,
            content_type=response.headers.get('Content-Type', 'application/octet-stream'),
        )

    def stream_lines(self, path: str, **kwargs) -> Iterator[str]:
        """Open a streaming GET and return an iterator over its text lines

        The connection is opened before returning, so a failing backend
        raises BackendError here rather than mid-stream.
        """
        response = self.request('GET', path, stream=True, **kwargs)
        if 'charset' not in response.headers.get('Content-Type', ''):
            # event streams are always UTF-8
            response.encoding = 'utf-8'

        def lines():
            try:
                for line in response.iter_lines(decode_unicode=True):
                    yield line
            except requests.exceptions.RequestException as e:
                logger.error("Backend stream %s broke: %s", path, e)
                raise BackendError(None, f'Backend stream interrupted: {e}') from e
            finally:
                response.close()

        return lines()


def get_backend_client() -> BackendClient:
    """Backend client registered on the running app"""
    return current_app.extensions['backend_client']

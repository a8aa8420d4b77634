import struct

import pytest

from finance_portal.config.settings import PortalConfig
from finance_portal.core import BackendError, DownloadedFile
from finance_portal.portal_app import PortalApp


class FakeBackendClient:
    """Records backend calls and answers from a script keyed by (method, path)"""

    def __init__(self):
        self.calls = []
        self.responses = {}

    def script(self, method, path, response):
        """response may be a value, a BackendError to raise, or a callable"""
        self.responses[(method, path)] = response

    def _answer(self, method, path, **kwargs):
        self.calls.append({'method': method, 'path': path, **kwargs})
        response = self.responses.get((method, path), {})
        if isinstance(response, BackendError):
            raise response
        if callable(response):
            return response(**kwargs)
        return response

    def get(self, path, **kwargs):
        return self._answer('GET', path, **kwargs)

    def post(self, path, **kwargs):
        return self._answer('POST', path, **kwargs)

    def put(self, path, **kwargs):
        return self._answer('PUT', path, **kwargs)

    def delete(self, path, **kwargs):
        return self._answer('DELETE', path, **kwargs)

    def download(self, path, default_filename, method='GET', **kwargs):
        response = self._answer('DOWNLOAD', path, http_method=method, **kwargs)
        if isinstance(response, DownloadedFile):
            return response
        return DownloadedFile(content=b'data', filename=default_filename)

    def stream_lines(self, path, **kwargs):
        """Scripted value is the list of lines the backend streams"""
        return iter(self._answer('STREAM', path, **kwargs) or [])

    def paths(self, method=None):
        return [c['path'] for c in self.calls if method is None or c['method'] == method]


def zip_local_header(flags=0, name=b'statement.xlsx', body=b'x' * 10):
    """A single ZIP local file header followed by its data"""
    header = struct.pack('<IHHHHHIIIHH', 0x04034b50, 20, flags, 0, 0, 0, 0,
                         len(body), len(body), len(name), 0)
    return header + name + body


@pytest.fixture
def zip_bytes():
    return zip_local_header


@pytest.fixture
def test_config(tmp_path):
    class TestConfig(PortalConfig):
        TESTING = True
        SECRET_KEY = 'test-secret'
        RATELIMIT_ENABLED = False
        ENABLE_HEALTH_MONITOR = False
        PARSE_HISTORY_PATH = str(tmp_path / 'history.json')

    return TestConfig


@pytest.fixture
def backend():
    return FakeBackendClient()


@pytest.fixture
def app(test_config, backend):
    app = PortalApp(test_config).create_app()
    app.extensions['backend_client'] = backend
    return app


@pytest.fixture
def client(app):
    return app.test_client()

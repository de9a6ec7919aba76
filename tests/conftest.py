import base64
import io
import json
import struct
import zlib

import pytest
from PIL import Image

from connector_blockchain import registry
from connector_blockchain.conf import ConnectorOptions
from connector_blockchain.utils import numbers_client

NUMBERS_UID = "70d8664a-d512-4517-a5e8-5d4da81756a7"


class FakeResponse:
    def __init__(self, status_code=200, body=None, text=None):
        self.status_code = status_code
        if text is None:
            text = json.dumps(body) if body is not None else ""
        self.text = text

    def json(self):
        return json.loads(self.text)


class FakeHttp:
    """Stands in for requests.get/requests.post, routed by URL."""

    def __init__(self):
        self.calls = []
        self.routes = {}

    def route(self, url, *results):
        self.routes[url] = list(results)

    def _dispatch(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        queue = self.routes.get(url)
        if not queue:
            raise AssertionError(f"unexpected {method} {url}")
        result = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(result, Exception):
            raise result
        return result

    def post(self, url, **kwargs):
        return self._dispatch("POST", url, **kwargs)

    def get(self, url, **kwargs):
        return self._dispatch("GET", url, **kwargs)

    def urls(self):
        return [url for _, url, _ in self.calls]


@pytest.fixture
def fake_http(monkeypatch):
    fake = FakeHttp()
    monkeypatch.setattr(numbers_client.requests, "post", fake.post)
    monkeypatch.setattr(numbers_client.requests, "get", fake.get)
    return fake


@pytest.fixture
def options():
    return ConnectorOptions()


@pytest.fixture
def png_bytes():
    buf = io.BytesIO()
    Image.new("RGB", (4, 4), (255, 0, 0)).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def oversized_png_bytes():
    """PNG header declaring 20000x20000 pixels, past Pillow's decompression bomb limit."""
    def chunk(kind, data):
        return struct.pack(">I", len(data)) + kind + data + struct.pack(">I", zlib.crc32(kind + data))

    ihdr = struct.pack(">II", 20000, 20000) + bytes([8, 2, 0, 0, 0])
    return (
        b"\x89PNG\r\n\x1a\n"
        + chunk(b"IHDR", ihdr)
        + chunk(b"IDAT", b"")
        + chunk(b"IEND", b"")
    )


@pytest.fixture
def png_b64(png_bytes):
    return base64.b64encode(png_bytes).decode("ascii")


@pytest.fixture
def fresh_registry(monkeypatch):
    monkeypatch.setattr(registry, "_connector", None)

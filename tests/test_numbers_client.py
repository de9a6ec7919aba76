import hashlib
import io

import pytest
import requests
from PIL import Image

from connector_blockchain.exceptions import (
    MissingFieldError,
    ProtocolError,
    TransportError,
    UpstreamError,
)
from connector_blockchain.records import Commit
from connector_blockchain.utils.numbers_client import (
    NumbersClient,
    compute_sha256,
    detect_content_type,
)
from tests.conftest import FakeResponse


def _commit(cid="Qm123"):
    return Commit(
        asset_cid=cid,
        asset_sha256="0" * 64,
        encoding_format="image/png",
        asset_timestamp_created=1700000000,
    )


def test_pin_uploads_multipart_file_with_token(fake_http, options, png_bytes):
    fake_http.route(options.pin_url, FakeResponse(200, {"cid": "Qm123"}))

    cid, sha = NumbersClient(options).pin(png_bytes, "abc")

    assert cid == "Qm123"
    assert sha == hashlib.sha256(png_bytes).hexdigest()

    method, url, kwargs = fake_http.calls[0]
    assert method == "POST"
    assert kwargs["headers"]["Authorization"] == "token abc"
    assert kwargs["files"] == {"file": ("file.jpg", png_bytes)}
    assert kwargs["timeout"] == options.timeout


def test_pin_without_cid_is_a_protocol_error(fake_http, options):
    fake_http.route(options.pin_url, FakeResponse(200, {"id": "nope"}))

    with pytest.raises(MissingFieldError) as exc_info:
        NumbersClient(options).pin(b"data", "abc")

    assert exc_info.value.field == "cid"
    assert isinstance(exc_info.value, ProtocolError)


def test_pin_with_non_json_body_is_a_protocol_error(fake_http, options):
    fake_http.route(options.pin_url, FakeResponse(200, text="<html>ok</html>"))

    with pytest.raises(ProtocolError):
        NumbersClient(options).pin(b"data", "abc")


def test_pin_non_200_raises_raw_body(fake_http, options):
    fake_http.route(options.pin_url, FakeResponse(500, text="rate limited"))

    with pytest.raises(UpstreamError) as exc_info:
        NumbersClient(options).pin(b"data", "abc")

    assert str(exc_info.value) == "rate limited"
    assert exc_info.value.status == 500


def test_pin_transport_failure(fake_http, options):
    fake_http.route(options.pin_url, requests.exceptions.ConnectionError("refused"))

    with pytest.raises(TransportError):
        NumbersClient(options).pin(b"data", "abc")


def test_commit_posts_json_and_returns_cids(fake_http, options):
    fake_http.route(
        options.commit_url,
        FakeResponse(200, {"assetCid": "Qm123", "assetTreeCid": "Qt456"}),
    )

    result = NumbersClient(options).commit(_commit(), "abc")

    assert result == ("Qm123", "Qt456")
    _, _, kwargs = fake_http.calls[0]
    assert kwargs["json"]["assetCid"] == "Qm123"
    assert kwargs["headers"]["Authorization"] == "token abc"


@pytest.mark.parametrize("body,field", [
    ({"assetTreeCid": "Qt456"}, "assetCid"),
    ({"assetCid": "Qm123"}, "assetTreeCid"),
])
def test_commit_missing_field(fake_http, options, body, field):
    fake_http.route(options.commit_url, FakeResponse(200, body))

    with pytest.raises(MissingFieldError) as exc_info:
        NumbersClient(options).commit(_commit(), "abc")

    assert exc_info.value.field == field


def test_commit_non_200_raises_raw_body(fake_http, options):
    fake_http.route(options.commit_url, FakeResponse(403, text='{"detail": "bad token"}'))

    with pytest.raises(UpstreamError) as exc_info:
        NumbersClient(options).commit(_commit(), "abc")

    assert str(exc_info.value) == '{"detail": "bad token"}'


def test_check_identity(fake_http, options):
    client = NumbersClient(options)

    fake_http.route(options.me_url, FakeResponse(200, {"username": "me"}))
    assert client.check_identity("abc") is True

    fake_http.route(options.me_url, FakeResponse(401, text="unauthorized"))
    assert client.check_identity("abc") is False

    fake_http.route(options.me_url, requests.exceptions.Timeout("slow"))
    assert client.check_identity("abc") is False


def test_sha256_is_deterministic_lowercase_hex():
    first = compute_sha256(b"same bytes")
    second = compute_sha256(b"same bytes")

    assert first == second
    assert len(first) == 64
    assert first == first.lower()
    assert compute_sha256(b"") == (
        "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
    )


def test_detect_content_type(png_bytes):
    assert detect_content_type(png_bytes) == "image/png"
    assert detect_content_type(b"hello world") == "text/plain; charset=utf-8"
    assert detect_content_type(b"\x80\x81\x82\x83") == "application/octet-stream"


def test_detect_content_type_survives_decompression_bomb(oversized_png_bytes):
    with pytest.raises(Image.DecompressionBombError):
        Image.open(io.BytesIO(oversized_png_bytes))

    assert detect_content_type(oversized_png_bytes) == "application/octet-stream"

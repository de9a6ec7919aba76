"""
Numbers Protocol API Client

Handles the provenance service calls: pinning an asset, committing its
provenance record and checking the token against the identity endpoint.
Uses the capture token for authentication.
"""

import hashlib
import io
import logging
from typing import Tuple

import requests
from PIL import Image, UnidentifiedImageError

from ..conf import ConnectorOptions
from ..exceptions import MissingFieldError, ProtocolError, TransportError, UpstreamError
from ..records import Commit
from .masking import mask_token

logger = logging.getLogger(__name__)

PIN_FILE_FIELD = "file"
PIN_FILE_NAME = "file.jpg"


def _get_headers(token: str) -> dict:
    """Get headers for Numbers Protocol API requests."""
    return {
        "Authorization": f"token {token}",
        # One-shot connections; nothing is kept alive between calls
        "Connection": "close",
    }


def compute_sha256(data: bytes) -> str:
    """Lowercase hex SHA-256 of the raw bytes."""
    return hashlib.sha256(data).hexdigest()


def detect_content_type(data: bytes) -> str:
    """
    Sniff the MIME type of an asset from its content.

    Images are identified by Pillow; anything else falls back to
    text/plain for UTF-8 text and application/octet-stream otherwise.
    """
    try:
        with Image.open(io.BytesIO(data)) as img:
            mime = Image.MIME.get(img.format or "")
            if mime:
                return mime
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError, SyntaxError):
        pass

    try:
        data.decode("utf-8")
    except UnicodeDecodeError:
        return "application/octet-stream"
    return "text/plain; charset=utf-8"


def _read_json(response: requests.Response, operation: str) -> dict:
    try:
        body = response.json()
    except ValueError as e:
        raise ProtocolError(f"{operation} response is not JSON: {response.text[:200]}") from e
    if not isinstance(body, dict):
        raise ProtocolError(f"{operation} response is not a JSON object")
    return body


def _require_str(body: dict, operation: str, field: str) -> str:
    value = body.get(field)
    if not isinstance(value, str) or not value:
        raise MissingFieldError(operation, field)
    return value


class NumbersClient:
    """
    Blocking client for the Numbers Protocol provenance service.

    Every call is an independent request with an explicit timeout;
    no session or retry state is shared between calls.
    """

    def __init__(self, options: ConnectorOptions = None):
        self.options = options or ConnectorOptions()

    def _post(self, operation: str, url: str, token: str, **kwargs) -> requests.Response:
        try:
            response = requests.post(
                url,
                headers=_get_headers(token),
                timeout=self.options.timeout,
                **kwargs
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"Numbers {operation} transport error: {e}")
            raise TransportError(f"{operation} request failed: {e}") from e

        logger.debug(f"Numbers {operation} as {mask_token(token)}: HTTP {response.status_code}")

        if response.status_code != 200:
            raise UpstreamError(status=response.status_code, url=url, body=response.text)
        return response

    def pin(self, data: bytes, token: str) -> Tuple[str, str]:
        """
        Upload raw asset bytes.

        Args:
            data: Raw asset bytes
            token: Capture token

        Returns:
            (cid, sha256 hex digest)
        """
        sha256hash = compute_sha256(data)

        response = self._post(
            "pin",
            self.options.pin_url,
            token,
            files={PIN_FILE_FIELD: (PIN_FILE_NAME, data)},
        )

        cid = _require_str(_read_json(response, "pin"), "pin", "cid")
        logger.info(f"Pinned asset {cid} ({len(data)} bytes)")
        return cid, sha256hash

    def commit(self, commit: Commit, token: str) -> Tuple[str, str]:
        """
        Register the provenance record of a pinned asset.

        Args:
            commit: Commit payload referencing the pinned cid
            token: Capture token

        Returns:
            (assetCid, assetTreeCid)
        """
        response = self._post(
            "commit",
            self.options.commit_url,
            token,
            json=commit.to_dict(),
        )

        body = _read_json(response, "commit")
        asset_cid = _require_str(body, "commit", "assetCid")
        asset_tree_cid = _require_str(body, "commit", "assetTreeCid")
        logger.info(f"Committed asset {asset_cid} (tree {asset_tree_cid})")
        return asset_cid, asset_tree_cid

    def check_identity(self, token: str) -> bool:
        """
        Validate a capture token against the identity endpoint.

        Returns:
            True on HTTP 200, False on any other status or transport failure
        """
        try:
            response = requests.get(
                self.options.me_url,
                headers=_get_headers(token),
                timeout=self.options.timeout
            )
        except requests.exceptions.RequestException as e:
            logger.warning(f"Numbers identity check failed: {e}")
            return False

        if response.status_code == 200:
            return True

        logger.warning(
            f"Numbers identity check rejected {mask_token(token)}: HTTP {response.status_code}"
        )
        return False

"""
Connector Records

Typed views over the generic dict payloads. Payloads are schema-checked
at the boundary first; the classes here only convert, and raise
ConversionError for anything the schema could not express (bad base64).
"""

import base64
import binascii
import copy
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .exceptions import ConversionError

DEFAULT_DIGITAL_SOURCE_TYPE = "trainedAlgorithmicMedia"
DEFAULT_MINING_PREFERENCE = "notAllowed"


def decode_image(encoded: str) -> bytes:
    """
    Decode a base64 image, with or without a data URI prefix.

    Args:
        encoded: e.g. "iVBORw0..." or "data:image/png;base64,iVBORw0..."

    Returns:
        Raw image bytes
    """
    if encoded.startswith("data:"):
        _, sep, encoded = encoded.partition(",")
        if not sep:
            raise ConversionError("Malformed data URI: missing ','")
    try:
        return base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ConversionError(f"Image is not valid base64: {e}") from e


@dataclass
class CommitLicense:
    name: str = ""
    document: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "document": self.document}


@dataclass
class CommitCustom:
    """Provenance block nested under "custom" in a commit."""
    generated_through: str = ""
    generated_by: str = ""
    digital_source_type: str = DEFAULT_DIGITAL_SOURCE_TYPE
    mining_preference: str = DEFAULT_MINING_PREFERENCE
    creator_wallet: str = ""
    license: CommitLicense = field(default_factory=CommitLicense)

    # Optional attachments, sent only when the connection enables them
    texts: Optional[List[str]] = None
    structured_data: Optional[Dict[str, Any]] = None
    metadata: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "generatedThrough": self.generated_through,
            "generatedBy": self.generated_by,
            "digitalSourceType": self.digital_source_type,
            "miningPreference": self.mining_preference,
            "creatorWallet": self.creator_wallet,
            "license": self.license.to_dict(),
        }
        if self.texts is not None:
            result["texts"] = self.texts
        if self.structured_data is not None:
            result["structuredData"] = self.structured_data
        if self.metadata is not None:
            result["metadata"] = self.metadata
        return result


@dataclass
class Commit:
    """
    Commit request body. Built per image, sent once.
    """
    asset_cid: str
    asset_sha256: str
    encoding_format: str
    asset_timestamp_created: int
    asset_creator: str = ""
    abstract: str = ""
    custom: CommitCustom = field(default_factory=CommitCustom)
    testnet: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON shape the commit endpoint expects."""
        return {
            "assetCid": self.asset_cid,
            "assetSha256": self.asset_sha256,
            "encodingFormat": self.encoding_format,
            "assetTimestampCreated": self.asset_timestamp_created,
            "assetCreator": self.asset_creator,
            "abstract": self.abstract,
            "custom": self.custom.to_dict(),
            "testnet": self.testnet,
        }


@dataclass
class NumbersInput:
    """One execute input record, images already decoded."""
    images: List[bytes]
    capture_token: Optional[str] = None
    asset_creator: str = ""
    abstract: str = ""
    generated_by: str = ""
    creator_wallet: str = ""
    digital_source_type: str = DEFAULT_DIGITAL_SOURCE_TYPE
    mining_preference: str = DEFAULT_MINING_PREFERENCE
    license_name: str = ""
    license_document: str = ""
    texts: List[str] = field(default_factory=list)
    structured_data: Dict[str, Any] = field(default_factory=dict)
    metadata: Dict[str, Any] = field(default_factory=dict)
    data_mapping_index: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NumbersInput":
        """
        Convert a validated input record.

        Raises:
            ConversionError: if a field has the wrong type or an image
                cannot be decoded
        """
        images = data.get("images")
        if not isinstance(images, list):
            raise ConversionError("Field 'images' must be a list")

        decoded = []
        for idx, image in enumerate(images):
            if not isinstance(image, str):
                raise ConversionError(f"images/{idx} must be a base64 string")
            try:
                decoded.append(decode_image(image))
            except ConversionError as e:
                raise ConversionError(f"images/{idx}: {e}") from e

        custom = data.get("custom") or {}
        license_fields = custom.get("license") or {}

        return cls(
            images=decoded,
            capture_token=data.get("capture_token") or None,
            asset_creator=data.get("asset_creator", ""),
            abstract=data.get("abstract", ""),
            generated_by=custom.get("generated_by", ""),
            creator_wallet=custom.get("creator_wallet", ""),
            digital_source_type=custom.get("digital_source_type", DEFAULT_DIGITAL_SOURCE_TYPE),
            mining_preference=custom.get("mining_preference", DEFAULT_MINING_PREFERENCE),
            license_name=license_fields.get("name", ""),
            license_document=license_fields.get("document", ""),
            texts=list(data.get("texts", [])),
            structured_data=copy.deepcopy(data.get("structured_data", {})),
            metadata=copy.deepcopy(data.get("metadata", {})),
            data_mapping_index=data.get("data_mapping_index"),
        )


@dataclass
class NumbersOutput:
    asset_urls: List[str] = field(default_factory=list)
    asset_cids: List[str] = field(default_factory=list)
    data_mapping_index: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "asset_urls": list(self.asset_urls),
            "asset_cids": list(self.asset_cids),
        }
        if self.data_mapping_index is not None:
            result["data_mapping_index"] = self.data_mapping_index
        return result

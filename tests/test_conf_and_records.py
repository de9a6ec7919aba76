import base64

import pytest

from connector_blockchain.conf import ConnectorOptions, ConnectorSettings
from connector_blockchain.exceptions import ConversionError, InitializationError
from connector_blockchain.records import Commit, CommitCustom, NumbersInput, decode_image
from connector_blockchain.utils.masking import mask_config, mask_token


def test_settings_prefer_explicit_then_env_then_defaults(monkeypatch):
    monkeypatch.setenv("CONNECTOR_BLOCKCHAIN_HTTP_TIMEOUT_SECONDS", "5")
    monkeypatch.setenv("CONNECTOR_BLOCKCHAIN_TESTNET", "true")
    monkeypatch.delenv("CONNECTOR_BLOCKCHAIN_NUMBERS_PIN_URL", raising=False)

    settings = ConnectorSettings({"TESTNET": False})

    assert settings.HTTP_TIMEOUT_SECONDS == 5.0
    assert settings.TESTNET is False
    assert settings.NUMBERS_PIN_URL == "https://eoqctv92ahgrcif.m.pipedream.net"

    with pytest.raises(AttributeError):
        settings.NOT_A_SETTING


def test_options_from_settings(monkeypatch):
    monkeypatch.setenv("CONNECTOR_BLOCKCHAIN_ASSET_PROFILE_URL", "https://example.com/a?cid={cid}")

    options = ConnectorOptions.from_settings(ConnectorSettings())

    assert options.asset_url("Qm1") == "https://example.com/a?cid=Qm1"
    with pytest.raises(AttributeError):
        options.timeout = 1


def test_default_asset_url():
    assert ConnectorOptions().asset_url("Qm123") == "https://nftsearch.site/asset-profile?cid=Qm123"


def test_decode_image_accepts_data_uri():
    encoded = base64.b64encode(b"\x89PNG").decode()

    assert decode_image(encoded) == b"\x89PNG"
    assert decode_image("data:image/png;base64," + encoded) == b"\x89PNG"

    with pytest.raises(ConversionError):
        decode_image("data:image/png;base64")
    with pytest.raises(ConversionError):
        decode_image("@@@")


def test_input_defaults_for_optional_fields():
    record = NumbersInput.from_dict({"images": [base64.b64encode(b"x").decode()]})

    assert record.images == [b"x"]
    assert record.capture_token is None
    assert record.asset_creator == ""
    assert record.texts == []
    assert record.data_mapping_index is None


def test_commit_wire_shape():
    commit = Commit(
        asset_cid="Qm123",
        asset_sha256="ab" * 32,
        encoding_format="image/png",
        asset_timestamp_created=1700000000,
        custom=CommitCustom(generated_through="https://console.instill.tech", texts=["t"]),
    )

    body = commit.to_dict()

    assert set(body) == {
        "assetCid", "assetSha256", "encodingFormat", "assetTimestampCreated",
        "assetCreator", "abstract", "custom", "testnet",
    }
    assert set(body["custom"]) == {
        "generatedThrough", "generatedBy", "digitalSourceType", "miningPreference",
        "creatorWallet", "license", "texts",
    }


def test_masking():
    assert mask_token("abcdefghijkl") == "••••••••ijkl"
    assert mask_token("abc") == "••••••••"
    assert mask_config({"capture_token": "abcdefghijkl", "testnet": True}, ["capture_token"]) == {
        "capture_token": "••••••••ijkl",
        "testnet": True,
    }


def test_malformed_env_override_is_an_initialization_error(monkeypatch):
    monkeypatch.setenv("CONNECTOR_BLOCKCHAIN_HTTP_TIMEOUT_SECONDS", "abc")

    with pytest.raises(InitializationError, match="CONNECTOR_BLOCKCHAIN_HTTP_TIMEOUT_SECONDS"):
        ConnectorOptions.from_settings(ConnectorSettings())

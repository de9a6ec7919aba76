"""
Numbers Protocol Connector Adapter

Implements the BaseConnector interface for Numbers Protocol.
Each image of an input record is pinned to the provenance service and
then committed with its provenance metadata.
"""

import logging
import os
import time
from typing import Any, Dict, List, Optional, Tuple

from ..base import BaseConnection, BaseConnector, ConnectionState, UidLike
from ..conf import ConnectorOptions
from ..definition_spec import ConnectorType, DefinitionParser
from ..exceptions import (
    DefinitionLoadError,
    InitializationError,
    RegistryError,
    SchemaValidationError,
    UnknownUidError,
)
from ..records import Commit, CommitCustom, CommitLicense, NumbersInput, NumbersOutput
from ..utils.masking import mask_config
from ..utils.numbers_client import NumbersClient, detect_content_type

logger = logging.getLogger(__name__)

SEED_DEFINITIONS_PATH = os.path.join(
    os.path.dirname(os.path.dirname(os.path.abspath(__file__))),
    'config', 'seed', 'definitions.yaml'
)


class NumbersConnection(BaseConnection):
    """
    Connection to Numbers Protocol for one capture token configuration.
    """

    def __init__(self, connector: 'NumbersConnector', definition, config: Dict[str, Any]):
        super().__init__(connector, definition, config)
        self._client = NumbersClient(connector.options)

    def _get_token(self, token: Optional[str] = None) -> str:
        """An explicit token wins; otherwise use the configured capture token."""
        return token or self.config['capture_token']

    def _need_upload_texts(self) -> bool:
        return bool(self.config.get('metadata_texts', False))

    def _need_upload_structured_data(self) -> bool:
        return bool(self.config.get('metadata_structured_data', False))

    def _need_upload_metadata(self) -> bool:
        return bool(self.config.get('metadata_metadata', False))

    def _testnet(self) -> bool:
        return bool(self.config.get('testnet', self.connector.options.testnet))

    def pin(self, data: bytes, token: Optional[str] = None) -> Tuple[str, str]:
        """Upload raw bytes. Returns (cid, sha256 hex)."""
        return self._client.pin(data, self._get_token(token))

    def commit(self, commit: Commit, token: Optional[str] = None) -> Tuple[str, str]:
        """Commit provenance. Returns (assetCid, assetTreeCid)."""
        return self._client.commit(commit, self._get_token(token))

    def _build_custom(self, record: NumbersInput) -> CommitCustom:
        custom = CommitCustom(
            generated_through=self.connector.options.generated_through,
            generated_by=record.generated_by,
            digital_source_type=record.digital_source_type,
            mining_preference=record.mining_preference,
            creator_wallet=record.creator_wallet,
            license=CommitLicense(
                name=record.license_name,
                document=record.license_document,
            ),
        )

        if self._need_upload_texts():
            custom.texts = record.texts
        if self._need_upload_structured_data():
            custom.structured_data = record.structured_data
        if self._need_upload_metadata():
            custom.metadata = record.metadata

        return custom

    def _process_record(self, record: NumbersInput) -> NumbersOutput:
        output = NumbersOutput(data_mapping_index=record.data_mapping_index)

        for image in record.images:
            encoding_format = detect_content_type(image)
            cid, sha256hash = self.pin(image, record.capture_token)

            asset_cid, _ = self.commit(
                Commit(
                    asset_cid=cid,
                    asset_sha256=sha256hash,
                    encoding_format=encoding_format,
                    asset_timestamp_created=int(time.time()),
                    asset_creator=record.asset_creator,
                    abstract=record.abstract,
                    custom=self._build_custom(record),
                    testnet=self._testnet(),
                ),
                record.capture_token,
            )

            output.asset_cids.append(asset_cid)
            output.asset_urls.append(self.connector.options.asset_url(asset_cid))

        return output

    def _execute(self, inputs: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        # Convert everything first so a bad image fails before any upload
        records = []
        for idx, data in enumerate(inputs):
            try:
                records.append(NumbersInput.from_dict(data))
            except SchemaValidationError as e:
                raise type(e)(f"inputs/{idx}: {e}") from e

        outputs = []
        for idx, record in enumerate(records):
            logger.info(f"Processing record {idx + 1}/{len(records)} ({len(record.images)} image(s))")
            outputs.append(self._process_record(record).to_dict())

        return outputs

    def test(self) -> ConnectionState:
        """
        Check the capture token against the identity endpoint.

        Returns:
            CONNECTED on HTTP 200, ERROR for anything else
        """
        try:
            ok = self._client.check_identity(self._get_token())
        except Exception as e:
            logger.exception(f"Numbers connection test failed unexpectedly: {e}")
            return ConnectionState.ERROR
        return ConnectionState.CONNECTED if ok else ConnectionState.ERROR


class NumbersConnector(BaseConnector):
    """
    Numbers Protocol connector.

    Serves the definitions from the seed document and creates
    NumbersConnection objects for them.
    """

    VENDOR_NAME = "numbers"

    def __init__(self, options: ConnectorOptions = None, definitions_path: str = SEED_DEFINITIONS_PATH):
        """
        Initialize the connector and load its definitions.

        Args:
            options: Immutable connector options
            definitions_path: Definitions document to load

        Raises:
            InitializationError: if the definitions cannot be loaded
        """
        super().__init__(options)

        try:
            definitions = DefinitionParser.load_file(
                definitions_path, self.VENDOR_NAME, ConnectorType.BLOCKCHAIN
            )
        except DefinitionLoadError as e:
            logger.error(f"Failed to load {self.VENDOR_NAME} definitions: {e}")
            raise InitializationError(str(e)) from e

        for definition in definitions:
            try:
                self.add_definition(definition.uid, definition.id, definition)
            except RegistryError as e:
                logger.warning(f"Skipping {self.VENDOR_NAME} definition {definition.id}: {e}")

    def create_connection(self, uid: UidLike, config: Dict[str, Any]) -> NumbersConnection:
        if not self.has_uid(uid):
            raise UnknownUidError(uid)
        definition = self.get_definition_by_uid(uid)
        return NumbersConnection(self, definition, config)

    def test(self, uid: UidLike, config: Dict[str, Any]) -> ConnectionState:
        try:
            connection = self.create_connection(uid, config)
        except SchemaValidationError as e:
            if isinstance(config, dict):
                config = mask_config(config, self.get_definition_by_uid(uid).credential_fields)
            logger.warning(f"Invalid configuration {config}: {e}")
            return ConnectionState.ERROR
        return connection.test()

"""
Connector Blockchain Package

Connector definition registry and the Numbers Protocol provenance
pipeline (pin an asset, then commit its provenance record).
"""

from .base import BaseConnection, BaseConnector, ConnectionState, Task
from .conf import ConnectorOptions, settings
from .definition_spec import ConnectorType, Definition, DefinitionParser
from .exceptions import (
    ConnectorError,
    ConversionError,
    DefinitionLoadError,
    DefinitionNotFoundError,
    DuplicateIdError,
    DuplicateUidError,
    InitializationError,
    MissingFieldError,
    ProtocolError,
    SchemaValidationError,
    TransportError,
    UnknownUidError,
    UpstreamError,
)
from .registry import BlockchainConnector, get_connector, init

__all__ = [
    'BaseConnection',
    'BaseConnector',
    'BlockchainConnector',
    'ConnectionState',
    'ConnectorError',
    'ConnectorOptions',
    'ConnectorType',
    'ConversionError',
    'Definition',
    'DefinitionLoadError',
    'DefinitionNotFoundError',
    'DefinitionParser',
    'DuplicateIdError',
    'DuplicateUidError',
    'InitializationError',
    'MissingFieldError',
    'ProtocolError',
    'SchemaValidationError',
    'Task',
    'TransportError',
    'UnknownUidError',
    'UpstreamError',
    'get_connector',
    'init',
    'settings',
]

"""
Base Connector

Abstract base classes that every connector variant and its connections
inherit from. The connector side owns the definition registry; the
connection side owns the validated execute pipeline.
"""

import logging
import uuid
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, List, Sequence, Union

from .conf import ConnectorOptions
from .definition_spec import Definition
from .exceptions import (
    DefinitionNotFoundError,
    DuplicateIdError,
    DuplicateUidError,
    UnknownUidError,
)
from .validation import validate_batch, validate_payload

logger = logging.getLogger(__name__)

UidLike = Union[uuid.UUID, str]


class ConnectionState(Enum):
    """Result of a connection health check."""
    CONNECTED = "STATE_CONNECTED"
    ERROR = "STATE_ERROR"


class Task(Enum):
    """Task a connection performs."""
    TASK_UNSPECIFIED = "TASK_UNSPECIFIED"


def to_uid(value: UidLike) -> uuid.UUID:
    """
    Normalize a uid given as UUID or string.

    Raises:
        UnknownUidError: if the value is not a valid uuid
    """
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        raise UnknownUidError(value) from None


class BaseConnector(ABC):
    """
    Abstract base class for all connectors.

    Holds the definitions a connector serves. Definitions are only
    added while the connector is being initialized; afterwards the
    mappings are read-only and safe to read from any thread.
    """

    VENDOR_NAME: str = "base"

    def __init__(self, options: ConnectorOptions = None):
        """
        Initialize the connector.

        Args:
            options: Immutable connector options
        """
        self.options = options or ConnectorOptions()
        self._definitions: Dict[uuid.UUID, Definition] = {}
        self._ids: Dict[str, uuid.UUID] = {}

    # Registry

    def add_definition(self, uid: UidLike, definition_id: str, definition: Definition):
        """
        Register a definition.

        Raises:
            DuplicateUidError: if the uid is already registered
            DuplicateIdError: if the id is already registered
        """
        uid = to_uid(uid)
        if uid in self._definitions:
            raise DuplicateUidError(uid)
        if definition_id in self._ids:
            raise DuplicateIdError(definition_id)

        self._definitions[uid] = definition
        self._ids[definition_id] = uid
        logger.debug(f"Registered definition {definition_id} ({uid}) on {self!r}")

    def has_uid(self, uid: UidLike) -> bool:
        try:
            return to_uid(uid) in self._definitions
        except UnknownUidError:
            return False

    def get_definition_by_uid(self, uid: UidLike) -> Definition:
        try:
            return self._definitions[to_uid(uid)]
        except (KeyError, UnknownUidError):
            raise DefinitionNotFoundError(uid) from None

    def get_definition_by_id(self, definition_id: str) -> Definition:
        uid = self._ids.get(definition_id)
        if uid is None:
            raise DefinitionNotFoundError(definition_id)
        return self._definitions[uid]

    def list_definition_uids(self) -> List[uuid.UUID]:
        """Return registered uids in insertion order."""
        return list(self._definitions.keys())

    def list_definitions(self) -> List[Definition]:
        """Return registered definitions in insertion order."""
        return list(self._definitions.values())

    def list_credential_fields(self, definition_id: str) -> List[str]:
        """Return the configuration keys of a definition that hold secrets."""
        return list(self.get_definition_by_id(definition_id).credential_fields)

    # Connections

    @abstractmethod
    def create_connection(self, uid: UidLike, config: Dict[str, Any]) -> "BaseConnection":
        """
        Create a connection bound to a definition and a configuration.

        Raises:
            UnknownUidError: if no definition matches the uid
            SchemaValidationError: if the config does not match the
                definition's connection schema
        """
        pass

    def create_execution(self, uid: UidLike, config: Dict[str, Any]) -> "BaseConnection":
        return self.create_connection(uid, config)

    @abstractmethod
    def test(self, uid: UidLike, config: Dict[str, Any]) -> ConnectionState:
        """
        Check a configuration for the given definition.

        Never raises for network failures; those are reported as ERROR.
        """
        pass

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}({self.VENDOR_NAME})>"


class BaseConnection(ABC):
    """
    Abstract base class for connections.

    A connection ties one definition to one validated configuration.
    It keeps no state besides that, and is meant for one caller at a
    time.
    """

    def __init__(self, connector: BaseConnector, definition: Definition, config: Dict[str, Any]):
        validate_payload(
            definition.connection_schema,
            config,
            f"{definition.id} connection configuration",
        )
        self.connector = connector
        self.definition = definition
        self.config = dict(config)

    @property
    def def_uid(self) -> uuid.UUID:
        return self.definition.uid

    def execute(self, inputs: Sequence[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """
        Run the connection over a batch of input records.

        The whole batch is validated before any side effect and the
        assembled outputs are validated before they are returned.
        Either every record produces an output or an error is raised.

        Args:
            inputs: Input records matching the definition's input schema

        Returns:
            Output records matching the definition's output schema, one
            per input record
        """
        validate_batch(self.definition.input_schema, inputs, f"{self.definition.id} inputs")

        outputs = self._execute(list(inputs))

        validate_batch(self.definition.output_schema, outputs, f"{self.definition.id} outputs")
        return outputs

    @abstractmethod
    def _execute(self, inputs: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Process an already validated batch."""
        pass

    @abstractmethod
    def test(self) -> ConnectionState:
        """Check the remote service. Must never raise."""
        pass

    def get_task(self) -> Task:
        return Task.TASK_UNSPECIFIED

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}({self.definition.id})>"

"""
Connector Errors

Every failure raised by the registry, the schema glue and the
provenance client derives from ConnectorError so the host can
catch the whole family in one place.
"""

from typing import List, Optional


class ConnectorError(Exception):
    """Base class for all connector errors."""


class InitializationError(ConnectorError):
    """Seed definitions could not be loaded. Fatal at startup."""


class DefinitionLoadError(ConnectorError):
    """A definitions document failed to parse or validate."""


# Registry

class RegistryError(ConnectorError):
    pass


class DuplicateUidError(RegistryError):
    def __init__(self, uid) -> None:
        super().__init__(f"definition uid already registered: {uid}")
        self.uid = uid


class DuplicateIdError(RegistryError):
    def __init__(self, definition_id: str) -> None:
        super().__init__(f"definition id already registered: {definition_id}")
        self.definition_id = definition_id


class DefinitionNotFoundError(RegistryError):
    def __init__(self, key) -> None:
        super().__init__(f"definition not found: {key}")
        self.key = key


class UnknownUidError(RegistryError):
    def __init__(self, uid) -> None:
        super().__init__(f"no connector owns definition uid: {uid}")
        self.uid = uid


# Payloads

class SchemaValidationError(ConnectorError):
    """
    A configuration or payload does not match its declared schema.

    Attributes:
        errors: Individual violation messages, one per failing path
    """

    def __init__(self, message: str, errors: Optional[List[str]] = None) -> None:
        self.errors = list(errors or [])
        if self.errors:
            message = f"{message}: {'; '.join(self.errors)}"
        super().__init__(message)


class ConversionError(SchemaValidationError):
    """A validated document could not be converted into a typed record."""


# Provenance service

class ProvenanceError(ConnectorError):
    pass


class ProtocolError(ProvenanceError):
    """The service answered 200 but the body is not what the protocol promises."""


class MissingFieldError(ProtocolError):
    def __init__(self, operation: str, field: str) -> None:
        super().__init__(f"{operation} response is missing '{field}'")
        self.operation = operation
        self.field = field


class UpstreamError(ProvenanceError):
    """
    Non-200 response. The message is the raw response body, unchanged,
    since it is the only diagnostic the service gives.
    """

    def __init__(self, *, status: int, url: str, body: str) -> None:
        super().__init__(body)
        self.status = status
        self.url = url
        self.body = body


class TransportError(ProvenanceError):
    """The request never produced a response (DNS, refused, timeout...)."""

"""
Connector Registry

Process-wide entry point that merges the definitions of every connector
variant and dispatches calls to the variant owning a definition uid.
"""

import logging
import threading
from typing import Any, Dict, List, Optional

from .adapters.numbers_adapter import NumbersConnector
from .base import BaseConnection, BaseConnector, ConnectionState, UidLike
from .conf import ConnectorOptions
from .exceptions import RegistryError, UnknownUidError

logger = logging.getLogger(__name__)


class BlockchainConnector(BaseConnector):
    """
    Dispatcher over the blockchain connector variants.

    The dispatcher registers a copy of each variant's definitions so it
    can answer lookups itself, and forwards connection calls to the
    variant that owns the uid.

    Usage:
        connector = BlockchainConnector(ConnectorOptions())
        connection = connector.create_connection(uid, {"capture_token": "..."})
        outputs = connection.execute([{"images": ["iVBORw0..."]}])
    """

    VENDOR_NAME = "blockchain"

    def __init__(self, options: ConnectorOptions = None, variants: List[BaseConnector] = None):
        """
        Initialize the dispatcher.

        Args:
            options: Immutable connector options shared with the variants
            variants: Pre-built variants; defaults to every known variant
        """
        super().__init__(options)

        if variants is None:
            variants = [NumbersConnector(self.options)]

        self._variants: List[BaseConnector] = []
        for variant in variants:
            self.register_variant(variant)

    def register_variant(self, variant: BaseConnector):
        """
        Merge a variant's definitions into this registry.

        Definitions that clash with an already registered uid or id are
        skipped with a warning; the variant is still registered.
        """
        for uid in variant.list_definition_uids():
            definition = variant.get_definition_by_uid(uid)
            try:
                self.add_definition(uid, definition.id, definition)
            except RegistryError as e:
                logger.warning(f"Skipping definition from {variant!r}: {e}")

        self._variants.append(variant)
        logger.info(f"Registered connector variant: {variant!r}")

    def _variant_for(self, uid: UidLike) -> BaseConnector:
        # Only uids merged into this registry are dispatched
        if not self.has_uid(uid):
            raise UnknownUidError(uid)
        for variant in self._variants:
            if variant.has_uid(uid):
                return variant
        raise UnknownUidError(uid)

    def list_variants(self) -> List[BaseConnector]:
        return list(self._variants)

    def create_connection(self, uid: UidLike, config: Dict[str, Any]) -> BaseConnection:
        return self._variant_for(uid).create_connection(uid, config)

    def test(self, uid: UidLike, config: Dict[str, Any]) -> ConnectionState:
        return self._variant_for(uid).test(uid, config)


# Global connector instance
_connector: Optional[BlockchainConnector] = None
_connector_lock = threading.Lock()


def init(options: ConnectorOptions = None) -> BlockchainConnector:
    """
    Initialize the process-wide connector exactly once.

    Concurrent first callers block until initialization finishes and
    all receive the same instance. Later calls return that instance and
    ignore their options.

    Raises:
        InitializationError: if the seed definitions cannot be loaded
    """
    global _connector
    if _connector is not None:
        return _connector

    with _connector_lock:
        if _connector is None:
            connector = BlockchainConnector(options or ConnectorOptions.from_settings())
            logger.info(
                f"Initialized blockchain connector with "
                f"{len(connector.list_definition_uids())} definition(s)"
            )
            _connector = connector
    return _connector


def get_connector() -> BlockchainConnector:
    """Get the global connector, initializing it with default options if needed."""
    return init()

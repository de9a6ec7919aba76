"""
Connector Adapters

Vendor-specific connector implementations.
"""

from .numbers_adapter import NumbersConnection, NumbersConnector

__all__ = [
    'NumbersConnection',
    'NumbersConnector',
]

"""
API Services Package

Provides the abstract resource interface and its HTTP implementation.
Controllers only depend on the interface, so tests can swap in a fake.
"""

from finaid.services.api.interface import (
    ApiError,
    DecodeError,
    FinAidApiInterface,
    HttpStatusError,
    ReadOnlyResourceInterface,
    ResourceInterface,
    TransportError,
)
from finaid.services.api.http_client import (
    ApiTransport,
    FinAidApiClient,
    HttpReadOnlyResource,
    HttpResource,
)

__all__ = [
    # Interfaces
    "FinAidApiInterface",
    "ReadOnlyResourceInterface",
    "ResourceInterface",
    # Exceptions
    "ApiError",
    "DecodeError",
    "HttpStatusError",
    "TransportError",
    # HTTP implementation
    "ApiTransport",
    "FinAidApiClient",
    "HttpReadOnlyResource",
    "HttpResource",
]

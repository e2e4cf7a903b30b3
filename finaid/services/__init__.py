"""Services package."""

from finaid.services.api import (
    ApiError,
    ApiTransport,
    DecodeError,
    FinAidApiClient,
    FinAidApiInterface,
    HttpStatusError,
    ReadOnlyResourceInterface,
    ResourceInterface,
    TransportError,
)

__all__ = [
    "ApiError",
    "ApiTransport",
    "DecodeError",
    "FinAidApiClient",
    "FinAidApiInterface",
    "HttpStatusError",
    "ReadOnlyResourceInterface",
    "ResourceInterface",
    "TransportError",
]

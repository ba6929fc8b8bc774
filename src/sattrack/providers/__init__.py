"""External collaborators: position, pass prediction and transmitter sources"""

from .base import (
    MissingApiKey,
    PassPredictionProvider,
    PendingRequest,
    PositionProvider,
    ProviderError,
    RateLimitExceeded,
    TransmitterDirectory,
)

__all__ = [
    "MissingApiKey",
    "PassPredictionProvider",
    "PendingRequest",
    "PositionProvider",
    "ProviderError",
    "RateLimitExceeded",
    "TransmitterDirectory",
]

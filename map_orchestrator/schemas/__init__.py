from .base import Envelope, ErrorEnvelope
from .map import PaddingUpdate, MapStateRead, MapCommandList

__all__ = [
    "Envelope",
    "ErrorEnvelope",
    "PaddingUpdate",
    "MapStateRead",
    "MapCommandList",
]

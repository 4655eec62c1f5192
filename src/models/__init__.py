from src.models.base import Base, UTCDateTime

__all__ = [
    "Base",
    "UTCDateTime",
]

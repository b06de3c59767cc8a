from .config import RecordConfig

__all__ = [
    "RecordConfig",
]

from .normalize import coerce_timestamp, normalize_history

__all__ = ["coerce_timestamp", "normalize_history"]

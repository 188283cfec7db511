from .normalize import normalize_events

__all__ = ["normalize_events"]

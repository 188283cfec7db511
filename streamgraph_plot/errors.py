from __future__ import annotations


class StreamgraphError(Exception):
    pass


class EventDataError(StreamgraphError, ValueError):
    pass


class LayoutError(StreamgraphError):
    pass


class MeshContractError(StreamgraphError, ValueError):
    pass


class ColorAssignmentError(StreamgraphError):
    """Raised when unique pick colors cannot be drawn within the retry budget."""


class ConfigError(StreamgraphError, ValueError):
    pass

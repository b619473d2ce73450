class ResonanceError(Exception):
    """Base class for resonance engine errors."""


class EmbeddingError(ResonanceError):
    """Raised when the embedding provider fails, times out or gets empty input.

    The node stays unembedded and can be retried later.
    """


class DimensionMismatchError(ResonanceError):
    """Raised when a vector does not have the configured dimensionality."""

    def __init__(self, expected: int, actual: int, context: str = "vector"):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"{context} has dimension {actual}, expected {expected}"
        )


class NodeNotFoundError(ResonanceError):
    """Raised when an operation references a node that does not exist."""

    def __init__(self, node_id: str):
        self.node_id = node_id
        super().__init__(f"Node {node_id} not found")

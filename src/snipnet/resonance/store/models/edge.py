from datetime import datetime

from pydantic import BaseModel, Field

from snipnet.resonance.store.models.node import Node


def pair_key(node_a: str, node_b: str) -> str:
    """Canonical key of the unordered pair {node_a, node_b}."""
    first, second = sorted((node_a, node_b))
    return f"{first}|{second}"


class ResonanceEdge(BaseModel):
    """
    A scored resonance between two nodes.

    node_a is the node whose processing created the edge, node_b the node it
    resonated with. Conceptually the edge is unordered; uniqueness is enforced
    on `pair_key`.
    """

    id: str | None = None
    node_a: str
    node_b: str
    score: float
    thinking: str = ""
    explanation: str = ""
    created_at: datetime = Field(default_factory=datetime.now)

    @property
    def pair_key(self) -> str:
        return pair_key(self.node_a, self.node_b)

    def other(self, node_id: str) -> str:
        """Return the endpoint opposite to node_id."""
        if node_id == self.node_a:
            return self.node_b
        if node_id == self.node_b:
            return self.node_a
        raise ValueError(f"Node {node_id} is not an endpoint of edge {self.id}")

    def touches(self, node_id: str) -> bool:
        return node_id in (self.node_a, self.node_b)


class Resonance(BaseModel):
    """An edge as seen from one of its endpoints, joined with the other node."""

    edge: ResonanceEdge
    neighbor_id: str
    neighbor: Node | None = None

    @property
    def score(self) -> float:
        return self.edge.score

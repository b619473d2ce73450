from .edge import Resonance, ResonanceEdge, pair_key
from .node import Node, SimilarNode

__all__ = [
    "Node",
    "Resonance",
    "ResonanceEdge",
    "SimilarNode",
    "pair_key",
]

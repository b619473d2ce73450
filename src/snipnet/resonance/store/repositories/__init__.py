from snipnet.resonance.store.repositories.edge import EdgeRepository
from snipnet.resonance.store.repositories.node import NodeRepository
from snipnet.resonance.store.repositories.vector import VectorRepository

__all__ = [
    "EdgeRepository",
    "NodeRepository",
    "VectorRepository",
]

from snipnet.resonance.clusters.builder import (
    ClusterBuilder,
    DisjointSet,
    network_stats,
)
from snipnet.resonance.clusters.models import (
    Cluster,
    ClusterNetworkStats,
    ClusterStrength,
    strength_for,
)

__all__ = [
    "Cluster",
    "ClusterBuilder",
    "ClusterNetworkStats",
    "ClusterStrength",
    "DisjointSet",
    "network_stats",
    "strength_for",
]

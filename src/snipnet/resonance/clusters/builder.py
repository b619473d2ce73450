import logging
import math
from collections import defaultdict
from collections.abc import Sequence

from snipnet.resonance.clusters.keywords import extract_keywords, theme_label
from snipnet.resonance.clusters.models import Cluster, ClusterNetworkStats
from snipnet.resonance.config import AppConfig, Config
from snipnet.resonance.store.models import Node, ResonanceEdge
from snipnet.resonance.store.repositories import EdgeRepository, NodeRepository

logger = logging.getLogger(__name__)

TOP_MEMBER_COUNT = 3


class DisjointSet:
    """Union-find over string ids with path compression and union by rank."""

    def __init__(self, ids: Sequence[str]):
        self.parent = {item: item for item in ids}
        self.rank = {item: 0 for item in ids}

    def find(self, item: str) -> str:
        root = item
        while self.parent[root] != root:
            root = self.parent[root]
        # Path compression
        while self.parent[item] != root:
            self.parent[item], item = root, self.parent[item]
        return root

    def union(self, a: str, b: str) -> None:
        root_a, root_b = self.find(a), self.find(b)
        if root_a == root_b:
            return
        if self.rank[root_a] < self.rank[root_b]:
            root_a, root_b = root_b, root_a
        self.parent[root_b] = root_a
        if self.rank[root_a] == self.rank[root_b]:
            self.rank[root_a] += 1


class ClusterBuilder:
    """Groups strongly resonating nodes into themed clusters.

    Clusters are connected components of the graph restricted to edges scored
    above `clusters.strong_threshold`. Isolated nodes whose own aggregate
    score clears `clusters.singleton_threshold` become size-one clusters.
    """

    def __init__(
        self,
        nodes: NodeRepository | None = None,
        edges: EdgeRepository | None = None,
        config: AppConfig = Config,
    ):
        self._nodes = nodes
        self._edges = edges
        self._config = config

    async def run(self) -> list[Cluster]:
        """Build clusters from a snapshot of the store."""
        if self._nodes is None or self._edges is None:
            raise RuntimeError("ClusterBuilder.run requires node and edge repositories")
        nodes = await self._nodes.list_all()
        edges = await self._edges.list_all()
        return self.build(nodes, edges)

    def _valid_nodes(self, nodes: Sequence[Node]) -> list[Node]:
        valid: list[Node] = []
        seen: set[str] = set()
        for node in nodes:
            if not node.id:
                logger.warning("Skipping node without id: %r", node.title)
                continue
            if node.id in seen:
                logger.warning("Skipping duplicate node %s", node.id)
                continue
            seen.add(node.id)
            valid.append(node)
        return valid

    def _strong_edges(
        self, edges: Sequence[ResonanceEdge], known: set[str]
    ) -> list[ResonanceEdge]:
        strong: list[ResonanceEdge] = []
        threshold = self._config.clusters.strong_threshold
        for edge in edges:
            if not edge.node_a or not edge.node_b:
                logger.warning("Skipping edge %s with missing endpoint", edge.id)
                continue
            if edge.node_a == edge.node_b:
                logger.warning("Skipping self-edge %s on %s", edge.id, edge.node_a)
                continue
            if not math.isfinite(edge.score):
                logger.warning("Skipping edge %s with score %r", edge.id, edge.score)
                continue
            if edge.node_a not in known or edge.node_b not in known:
                logger.warning(
                    "Skipping edge %s with unknown endpoint (%s <-> %s)",
                    edge.id,
                    edge.node_a,
                    edge.node_b,
                )
                continue
            if edge.score > threshold:
                strong.append(edge)
        return strong

    def build(
        self, nodes: Sequence[Node], edges: Sequence[ResonanceEdge]
    ) -> list[Cluster]:
        """Partition nodes into clusters, most resonant first.

        Members keep the order of `nodes`; pass them ordered by creation.
        """
        settings = self._config.clusters
        valid_nodes = self._valid_nodes(nodes)
        by_id = {node.id: node for node in valid_nodes if node.id}
        order = list(by_id)

        strong = self._strong_edges(edges, set(by_id))
        components = DisjointSet(order)
        for edge in strong:
            components.union(edge.node_a, edge.node_b)

        members: dict[str, list[str]] = defaultdict(list)
        for node_id in order:
            members[components.find(node_id)].append(node_id)

        scores: dict[str, list[float]] = defaultdict(list)
        for edge in strong:
            scores[components.find(edge.node_a)].append(edge.score)

        clusters: list[Cluster] = []
        clustered: set[str] = set()
        for root, member_ids in members.items():
            if len(member_ids) < 2:
                continue
            total = sum(scores[root])
            average = total / len(scores[root]) if scores[root] else 0.0
            clusters.append(
                self._make_cluster(
                    f"cluster-{len(clusters) + 1}",
                    [by_id[node_id] for node_id in member_ids],
                    average,
                    total,
                    position=len(clusters) + 1,
                )
            )
            clustered.update(member_ids)

        multi_count = len(clusters)
        for node_id in order:
            node = by_id[node_id]
            if node_id in clustered:
                continue
            if node.aggregate_score > settings.singleton_threshold:
                clusters.append(
                    self._make_cluster(
                        f"single-{node_id}",
                        [node],
                        node.aggregate_score,
                        node.aggregate_score,
                        position=len(clusters) + 1,
                    )
                )

        logger.debug(
            "Built %d clusters (%d singletons) from %d nodes and %d strong edges",
            len(clusters),
            len(clusters) - multi_count,
            len(order),
            len(strong),
        )
        # Stable: equal averages keep build order
        clusters.sort(key=lambda cluster: cluster.average_score, reverse=True)
        return clusters

    def _make_cluster(
        self,
        cluster_id: str,
        members: list[Node],
        average: float,
        total: float,
        position: int,
    ) -> Cluster:
        settings = self._config.clusters
        theme = theme_label(
            (node.title for node in members),
            min_length=settings.min_theme_token_length,
        )
        keywords = extract_keywords(
            (f"{node.title} {node.body}" for node in members),
            count=settings.keyword_count,
            min_length=settings.min_keyword_length,
            stopwords=settings.stopwords,
        )
        member_ids = [node.id for node in members if node.id]
        return Cluster(
            id=cluster_id,
            theme=theme or f"Cluster {position}",
            member_ids=member_ids,
            average_score=average,
            total_score=total,
            keywords=keywords,
            top_member_ids=member_ids[:TOP_MEMBER_COUNT],
        )


def network_stats(
    clusters: Sequence[Cluster], edges: Sequence[ResonanceEdge]
) -> ClusterNetworkStats:
    """Summary figures for a cluster build and the edges it was built from."""
    scores = [edge.score for edge in edges if math.isfinite(edge.score)]
    return ClusterNetworkStats(
        total_clusters=len(clusters),
        total_connections=len(edges),
        most_active_cluster=clusters[0].theme if clusters else "None",
        strongest_resonance=max(scores, default=0.0),
    )

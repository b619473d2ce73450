import logging
from pathlib import Path

from pydantic import BaseModel, Field

from snipnet.resonance.clusters import (
    Cluster,
    ClusterBuilder,
    ClusterNetworkStats,
    network_stats,
)
from snipnet.resonance.config import AppConfig, Config
from snipnet.resonance.embeddings import EmbedderBase, get_embedder
from snipnet.resonance.exceptions import EmbeddingError, NodeNotFoundError
from snipnet.resonance.explainer import ResonanceExplainer
from snipnet.resonance.pathways import PathwayStep, PathwayWalker
from snipnet.resonance.processor import ProcessingResult, ResonanceProcessor
from snipnet.resonance.scoring import ScoreAggregator
from snipnet.resonance.store.engine import Store
from snipnet.resonance.store.models import Node, Resonance
from snipnet.resonance.store.repositories import (
    EdgeRepository,
    NodeRepository,
    VectorRepository,
)

logger = logging.getLogger(__name__)


class BackfillReport(BaseModel):
    """Outcome of processing every node in the database."""

    processed: list[ProcessingResult] = Field(default_factory=list)
    failures: dict[str, str] = Field(default_factory=dict)

    @property
    def created(self) -> int:
        return sum(len(result.created) for result in self.processed)


class ResonanceEngine:
    """High-level resonance engine client."""

    def __init__(
        self,
        db_path: Path | None = None,
        config: AppConfig = Config,
        embedder: EmbedderBase | None = None,
        explainer: ResonanceExplainer | None = None,
        create: bool = False,
    ):
        """Open (or create) a resonance database.

        Args:
            db_path: Path to the database. If None, uses config.storage.data_dir.
            config: Configuration to use. Defaults to global Config.
            embedder: Embedder override. Defaults to the configured provider.
            explainer: Explainer override. Built on first use if None.
            create: Whether to create the database if it doesn't exist.
        """
        self._config = config
        if db_path is None:
            db_path = self._config.storage.data_dir / "resonance.lancedb"

        self.store = Store(db_path, config=self._config, create=create)
        self.node_repository = NodeRepository(self.store)
        self.vector_repository = VectorRepository(self.store)
        self.edge_repository = EdgeRepository(self.store)
        self.aggregator = ScoreAggregator(
            self.node_repository, self.edge_repository, self._config
        )

        self._embedder = embedder
        self._explainer = explainer
        self._processor: ResonanceProcessor | None = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):  # noqa: ARG002
        self.close()
        return False

    @property
    def embedder(self) -> EmbedderBase:
        if self._embedder is None:
            self._embedder = get_embedder(self._config)
        return self._embedder

    @property
    def explainer(self) -> ResonanceExplainer:
        if self._explainer is None:
            self._explainer = ResonanceExplainer(self._config)
        return self._explainer

    @property
    def processor(self) -> ResonanceProcessor:
        if self._processor is None:
            self._processor = ResonanceProcessor(
                self.node_repository,
                self.vector_repository,
                self.edge_repository,
                self.embedder,
                self.explainer,
                self.aggregator,
                self._config,
            )
        return self._processor

    async def _require_node(self, node_id: str) -> Node:
        node = await self.node_repository.get_by_id(node_id)
        if node is None:
            raise NodeNotFoundError(node_id)
        return node

    async def create_node(self, title: str, body: str = "") -> Node:
        """Store a new node. It is embedded on its first resonance pass."""
        return await self.node_repository.create(Node(title=title, body=body))

    async def get_node(self, node_id: str) -> Node | None:
        node = await self.node_repository.get_by_id(node_id)
        if node is not None:
            node.embedding = await self.vector_repository.get(node_id)
        return node

    async def list_nodes(
        self, limit: int | None = None, offset: int | None = None
    ) -> list[Node]:
        return await self.node_repository.list_all(limit=limit, offset=offset)

    async def delete_node(self, node_id: str) -> bool:
        """Delete a node with its embedding and edges.

        Former neighbours get their aggregate scores recomputed.
        """
        if await self.node_repository.get_by_id(node_id) is None:
            return False

        removed = await self.edge_repository.delete_for_node(node_id)
        await self.vector_repository.delete(node_id)
        await self.node_repository.delete(node_id)

        for neighbor_id in {edge.other(node_id) for edge in removed}:
            await self.aggregator.recompute(neighbor_id)
        return True

    async def process_resonance(self, node_id: str) -> ProcessingResult:
        """Embed a node if needed and link it to its resonating nodes.

        Raises:
            NodeNotFoundError: If the node does not exist.
            EmbeddingError: If the node cannot be embedded.
        """
        return await self.processor.process(node_id)

    async def process_all(self) -> BackfillReport:
        """Run a resonance pass over every node, oldest first.

        Embedding failures are collected per node instead of aborting.
        """
        report = BackfillReport()
        for node in await self.node_repository.list_all():
            assert node.id is not None
            try:
                report.processed.append(await self.processor.process(node.id))
            except EmbeddingError as e:
                logger.warning("Could not embed node %s: %s", node.id, e)
                report.failures[node.id] = str(e)
        return report

    async def get_resonances(self, node_id: str, limit: int = 10) -> list[Resonance]:
        """Resonances of a node in either direction, most resonant first."""
        edges = await self.edge_repository.get_for_node(node_id, limit=limit)
        resonances: list[Resonance] = []
        for edge in edges:
            neighbor_id = edge.other(node_id)
            resonances.append(
                Resonance(
                    edge=edge,
                    neighbor_id=neighbor_id,
                    neighbor=await self.node_repository.get_by_id(neighbor_id),
                )
            )
        return resonances

    async def find_pathways(
        self, node_id: str, depth: int | None = None
    ) -> list[PathwayStep]:
        walker = PathwayWalker(self.node_repository, self.edge_repository, self._config)
        return await walker.walk(node_id, depth)

    async def build_clusters(self) -> list[Cluster]:
        builder = ClusterBuilder(
            self.node_repository, self.edge_repository, self._config
        )
        return await builder.run()

    async def cluster_network_stats(self) -> ClusterNetworkStats:
        nodes = await self.node_repository.list_all()
        edges = await self.edge_repository.list_all()
        clusters = ClusterBuilder(config=self._config).build(nodes, edges)
        return network_stats(clusters, edges)

    async def get_aggregate_score(self, node_id: str) -> float:
        node = await self._require_node(node_id)
        return node.aggregate_score

    async def delete_resonance(self, edge_id: str) -> bool:
        """Delete an edge and recompute the scores of both endpoints."""
        edge = await self.edge_repository.delete(edge_id)
        if edge is None:
            return False

        for node_id in (edge.node_a, edge.node_b):
            if await self.node_repository.get_by_id(node_id) is not None:
                await self.aggregator.recompute(node_id)
        return True

    def close(self):
        """Close the underlying store."""
        self.store.close()

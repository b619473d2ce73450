import logging

from pydantic import BaseModel, Field

from snipnet.resonance.config import AppConfig, Config
from snipnet.resonance.embeddings import EmbedderBase, node_text
from snipnet.resonance.exceptions import NodeNotFoundError
from snipnet.resonance.explainer import ResonanceExplainer
from snipnet.resonance.scoring import ScoreAggregator
from snipnet.resonance.store.models import Node, ResonanceEdge
from snipnet.resonance.store.repositories import (
    EdgeRepository,
    NodeRepository,
    VectorRepository,
)

logger = logging.getLogger(__name__)


class ProcessingResult(BaseModel):
    """Outcome of one resonance pass over a node."""

    node_id: str
    created: list[ResonanceEdge] = Field(default_factory=list)
    skipped: int = 0
    score: float = 0.0


class ResonanceProcessor:
    """Embeds a node, finds its resonating neighbours and links them.

    Processing is idempotent: pairs that already have an edge are skipped
    without asking the explainer, so re-running on the same node only adds
    edges for nodes embedded since the previous pass.
    """

    def __init__(
        self,
        nodes: NodeRepository,
        vectors: VectorRepository,
        edges: EdgeRepository,
        embedder: EmbedderBase,
        explainer: ResonanceExplainer,
        aggregator: ScoreAggregator,
        config: AppConfig = Config,
    ):
        self._nodes = nodes
        self._vectors = vectors
        self._edges = edges
        self._embedder = embedder
        self._explainer = explainer
        self._aggregator = aggregator
        self._config = config

    async def ensure_embedding(self, node: Node) -> list[float]:
        """Return the node's embedding, creating and storing it if missing.

        Raises:
            EmbeddingError: If the provider fails. Nothing is stored.
        """
        assert node.id is not None
        vector = await self._vectors.get(node.id)
        if vector is None:
            vector = await self._embedder.embed(node_text(node.title, node.body))
            await self._vectors.upsert(node.id, vector)
            logger.debug("Embedded node %s", node.id)
        node.embedding = vector
        return vector

    async def process(self, node_id: str) -> ProcessingResult:
        node = await self._nodes.get_by_id(node_id)
        if node is None:
            raise NodeNotFoundError(node_id)

        vector = await self.ensure_embedding(node)
        hits = await self._vectors.top_similar(
            vector,
            exclude_id=node_id,
            k=self._config.resonance.max_per_node,
            min_score=self._config.resonance.threshold,
        )

        result = ProcessingResult(node_id=node_id)
        for hit in hits:
            if await self._edges.exists_between(node_id, hit.node_id):
                logger.debug(
                    "Resonance %s <-> %s already exists, skipping",
                    node_id,
                    hit.node_id,
                )
                result.skipped += 1
                continue

            neighbor = await self._nodes.get_by_id(hit.node_id)
            if neighbor is None:
                logger.warning(
                    "Embedding of node %s has no matching node, skipping",
                    hit.node_id,
                )
                result.skipped += 1
                continue

            score = min(hit.score, 1.0)
            explanation = await self._explainer.explain(
                node_text(node.title, node.body),
                node_text(neighbor.title, neighbor.body),
                score,
            )
            edge, created = await self._edges.create_if_absent(
                ResonanceEdge(
                    node_a=node_id,
                    node_b=hit.node_id,
                    score=score,
                    thinking=explanation.thinking,
                    explanation=explanation.explanation,
                )
            )
            if not created:
                result.skipped += 1
                continue

            result.created.append(edge)
            logger.info(
                "Created resonance: %s <-> %s (score: %.3f)",
                node_id,
                hit.node_id,
                score,
            )

        result.score = await self._aggregator.recompute(node_id)
        for edge in result.created:
            await self._aggregator.recompute(edge.other(node_id))
        return result

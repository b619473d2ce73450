import logging
from collections.abc import Sequence

from snipnet.resonance.config import AppConfig, Config
from snipnet.resonance.config.models import ScoringConfig
from snipnet.resonance.store.repositories.edge import EdgeRepository
from snipnet.resonance.store.repositories.node import NodeRepository

logger = logging.getLogger(__name__)


def aggregate_score(
    scores: Sequence[float], weights: ScoringConfig | None = None
) -> float:
    """Roll edge scores up into a node's aggregate resonance score.

    score = avg * 0.5 + max * 0.3 + min(count / 10, 1) * 0.2, or 0 without
    edges. The result is clamped to [0, 1].
    """
    if not scores:
        return 0.0

    weights = weights or ScoringConfig()
    count = len(scores)
    average = sum(scores) / count
    peak = max(scores)
    breadth = min(count / weights.breadth_cap, 1.0)

    score = (
        average * weights.average_weight
        + peak * weights.peak_weight
        + breadth * weights.breadth_weight
    )
    return min(max(score, 0.0), 1.0)


class ScoreAggregator:
    """Recomputes and persists a node's aggregate score from its edges."""

    def __init__(
        self,
        nodes: NodeRepository,
        edges: EdgeRepository,
        config: AppConfig = Config,
    ):
        self._nodes = nodes
        self._edges = edges
        self._config = config

    async def recompute(self, node_id: str) -> float:
        """Recompute from all edges touching node_id and persist the result."""
        edges = await self._edges.get_for_node(node_id)
        score = aggregate_score([edge.score for edge in edges], self._config.scoring)
        await self._nodes.set_aggregate_score(node_id, score)

        logger.info(
            "Updated resonance score for node %s: %.3f (%d resonances)",
            node_id,
            score,
            len(edges),
        )
        return score

import logging

from pydantic import BaseModel, Field

from snipnet.resonance.config import AppConfig, Config
from snipnet.resonance.exceptions import NodeNotFoundError
from snipnet.resonance.store.models import Node, ResonanceEdge
from snipnet.resonance.store.repositories import EdgeRepository, NodeRepository

logger = logging.getLogger(__name__)


class PathwayStep(BaseModel):
    """One hop of a resonance pathway and the hops reachable from it."""

    edge: ResonanceEdge
    neighbor_id: str
    neighbor: Node | None = None
    connected: list["PathwayStep"] = Field(default_factory=list)

    @property
    def score(self) -> float:
        return self.edge.score


class PathwayWalker:
    """Walks outward from a node along its strongest resonances.

    The first level keeps the top `pathways.direct_limit` edges, every deeper
    level the top `pathways.branch_limit` per node. Nodes already on the path
    from the start are never revisited, so walks cannot loop back.
    """

    def __init__(
        self,
        nodes: NodeRepository,
        edges: EdgeRepository,
        config: AppConfig = Config,
    ):
        self._nodes = nodes
        self._edges = edges
        self._config = config

    async def walk(self, start_id: str, depth: int | None = None) -> list[PathwayStep]:
        """Return resonance pathways from start_id, nested up to depth levels.

        Raises:
            ValueError: If depth is negative.
            NodeNotFoundError: If the start node does not exist.
        """
        if depth is None:
            depth = self._config.pathways.default_depth
        if depth < 0:
            raise ValueError(f"Pathway depth must be non-negative, got {depth}")
        if await self._nodes.get_by_id(start_id) is None:
            raise NodeNotFoundError(start_id)

        return await self._expand(
            start_id,
            remaining=depth,
            path=frozenset({start_id}),
            limit=self._config.pathways.direct_limit,
        )

    async def _expand(
        self, node_id: str, remaining: int, path: frozenset[str], limit: int
    ) -> list[PathwayStep]:
        if remaining <= 0:
            return []

        steps: list[PathwayStep] = []
        for edge in await self._edges.get_for_node(node_id):
            neighbor_id = edge.other(node_id)
            if neighbor_id in path:
                continue
            steps.append(
                PathwayStep(
                    edge=edge,
                    neighbor_id=neighbor_id,
                    neighbor=await self._nodes.get_by_id(neighbor_id),
                )
            )
            if len(steps) >= limit:
                break

        for step in steps:
            step.connected = await self._expand(
                step.neighbor_id,
                remaining=remaining - 1,
                path=path | {step.neighbor_id},
                limit=self._config.pathways.branch_limit,
            )
        return steps

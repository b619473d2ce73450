import logging
import math
from datetime import datetime
from uuid import uuid4

from snipnet.resonance.store.engine import EdgeRecord, Store, full_scan, quote
from snipnet.resonance.store.models.edge import ResonanceEdge, pair_key

logger = logging.getLogger(__name__)


class EdgeRepository:
    """Repository for resonance edges.

    At most one edge exists per unordered node pair. Edges are immutable:
    there is no update, only create and delete.
    """

    def __init__(self, store: Store) -> None:
        self.store = store

    def _to_edge(self, record: EdgeRecord) -> ResonanceEdge:
        return ResonanceEdge(
            id=record.id,
            node_a=record.node_a,
            node_b=record.node_b,
            score=record.score,
            thinking=record.thinking,
            explanation=record.explanation,
            created_at=datetime.fromisoformat(record.created_at)
            if record.created_at
            else datetime.now(),
        )

    def _query(self, where: str) -> list[ResonanceEdge]:
        results = full_scan(self.store.edges_table, where).to_pydantic(EdgeRecord)
        return [self._to_edge(record) for record in results]

    async def get_by_id(self, edge_id: str) -> ResonanceEdge | None:
        """Get an edge by its ID."""
        results = list(
            self.store.edges_table.search()
            .where(f"id = {quote(edge_id)}")
            .limit(1)
            .to_pydantic(EdgeRecord)
        )
        if not results:
            return None
        return self._to_edge(results[0])

    async def get_between(self, node_a: str, node_b: str) -> ResonanceEdge | None:
        """Get the edge between two nodes, in either direction."""
        results = list(
            self.store.edges_table.search()
            .where(f"pair_key = {quote(pair_key(node_a, node_b))}")
            .limit(1)
            .to_pydantic(EdgeRecord)
        )
        if not results:
            return None
        return self._to_edge(results[0])

    async def exists_between(self, node_a: str, node_b: str) -> bool:
        return await self.get_between(node_a, node_b) is not None

    async def create_if_absent(
        self, entity: ResonanceEdge
    ) -> tuple[ResonanceEdge, bool]:
        """Insert an edge unless one already exists for the same node pair.

        The insert is a merge on `pair_key`, so concurrent writers racing on
        the same pair end up with a single row.

        Returns:
            The stored edge and whether this call created it.

        Raises:
            ValueError: For self-edges or non-finite scores.
        """
        if entity.node_a == entity.node_b:
            raise ValueError(f"Refusing to create self-edge on node {entity.node_a}")
        if not math.isfinite(entity.score):
            raise ValueError(f"Edge score must be finite, got {entity.score}")

        existing = await self.get_between(entity.node_a, entity.node_b)
        if existing is not None:
            return existing, False

        edge_id = str(uuid4())
        record = EdgeRecord(
            id=edge_id,
            node_a=entity.node_a,
            node_b=entity.node_b,
            pair_key=entity.pair_key,
            score=entity.score,
            thinking=entity.thinking,
            explanation=entity.explanation,
            created_at=entity.created_at.isoformat(),
        )
        (
            self.store.edges_table.merge_insert("pair_key")
            .when_not_matched_insert_all()
            .execute([record.model_dump()])
        )

        stored = await self.get_between(entity.node_a, entity.node_b)
        if stored is None:
            raise RuntimeError(
                f"Edge {entity.node_a} <-> {entity.node_b} missing after insert"
            )
        created = stored.id == edge_id
        if not created:
            logger.debug(
                "Edge %s <-> %s was inserted concurrently",
                entity.node_a,
                entity.node_b,
            )
        return stored, created

    async def get_for_node(
        self, node_id: str, limit: int | None = None
    ) -> list[ResonanceEdge]:
        """Edges touching a node, most resonant first."""
        quoted = quote(node_id)
        edges = self._query(f"node_a = {quoted} OR node_b = {quoted}")
        edges.sort(key=lambda edge: edge.score, reverse=True)
        if limit is not None:
            edges = edges[:limit]
        return edges

    async def list_all(self) -> list[ResonanceEdge]:
        results = full_scan(self.store.edges_table).to_pydantic(EdgeRecord)
        return [self._to_edge(record) for record in results]

    async def delete(self, edge_id: str) -> ResonanceEdge | None:
        """Delete an edge by ID. Returns the deleted edge, if any."""
        edge = await self.get_by_id(edge_id)
        if edge is None:
            return None

        self.store.edges_table.delete(f"id = {quote(edge_id)}")
        return edge

    async def delete_for_node(self, node_id: str) -> list[ResonanceEdge]:
        """Delete every edge touching a node. Returns the deleted edges."""
        edges = await self.get_for_node(node_id)
        if edges:
            quoted = quote(node_id)
            self.store.edges_table.delete(f"node_a = {quoted} OR node_b = {quoted}")
        return edges

    async def count(self) -> int:
        return self.store.edges_table.count_rows()

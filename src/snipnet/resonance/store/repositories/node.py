from datetime import datetime
from uuid import uuid4

from snipnet.resonance.store.engine import NodeRecord, Store, full_scan, quote
from snipnet.resonance.store.models.node import Node


class NodeRepository:
    """Repository for Node operations."""

    def __init__(self, store: Store) -> None:
        self.store = store

    def _to_node(self, record: NodeRecord) -> Node:
        return Node(
            id=record.id,
            title=record.title,
            body=record.body,
            aggregate_score=record.aggregate_score,
            created_at=datetime.fromisoformat(record.created_at)
            if record.created_at
            else datetime.now(),
            updated_at=datetime.fromisoformat(record.updated_at)
            if record.updated_at
            else datetime.now(),
        )

    async def create(self, entity: Node) -> Node:
        """Create a node in the database. Embeddings are created lazily."""
        node_id = entity.id or str(uuid4())
        now = datetime.now()

        record = NodeRecord(
            id=node_id,
            title=entity.title,
            body=entity.body,
            aggregate_score=0.0,
            created_at=entity.created_at.isoformat(),
            updated_at=now.isoformat(),
        )
        self.store.nodes_table.add([record])

        entity.id = node_id
        entity.aggregate_score = 0.0
        entity.updated_at = now
        return entity

    async def get_by_id(self, entity_id: str) -> Node | None:
        """Get a node by its ID."""
        results = list(
            self.store.nodes_table.search()
            .where(f"id = {quote(entity_id)}")
            .limit(1)
            .to_pydantic(NodeRecord)
        )

        if not results:
            return None
        return self._to_node(results[0])

    async def list_all(
        self, limit: int | None = None, offset: int | None = None
    ) -> list[Node]:
        """List all nodes ordered by creation time."""
        results = list(full_scan(self.store.nodes_table).to_pydantic(NodeRecord))
        nodes = sorted(
            (self._to_node(record) for record in results),
            key=lambda node: node.created_at,
        )

        if offset is not None:
            nodes = nodes[offset:]
        if limit is not None:
            nodes = nodes[:limit]
        return nodes

    async def set_aggregate_score(self, entity_id: str, score: float) -> None:
        """Persist a recomputed aggregate score."""
        self.store.nodes_table.update(
            where=f"id = {quote(entity_id)}",
            values={
                "aggregate_score": float(score),
                "updated_at": datetime.now().isoformat(),
            },
        )

    async def delete(self, entity_id: str) -> bool:
        """Delete a node by its ID."""
        node = await self.get_by_id(entity_id)
        if node is None:
            return False

        self.store.nodes_table.delete(f"id = {quote(entity_id)}")
        return True

    async def count(self) -> int:
        return self.store.nodes_table.count_rows()

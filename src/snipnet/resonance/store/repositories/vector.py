import math
from collections.abc import Sequence

from snipnet.resonance.store.engine import Store, full_scan, quote
from snipnet.resonance.store.models.node import SimilarNode


class VectorRepository:
    """Repository for node embeddings and nearest-neighbour queries."""

    def __init__(self, store: Store) -> None:
        self.store = store

    async def upsert(self, node_id: str, vector: Sequence[float]) -> None:
        """Store or replace the embedding of a node."""
        self.store.check_vector(vector, context=f"Embedding of node {node_id}")
        record = {"node_id": node_id, "vector": [float(v) for v in vector]}
        (
            self.store.vectors_table.merge_insert("node_id")
            .when_matched_update_all()
            .when_not_matched_insert_all()
            .execute([record])
        )

    async def get(self, node_id: str) -> list[float] | None:
        """Get the stored embedding of a node, or None if it is unembedded."""
        results = list(
            self.store.vectors_table.search()
            .where(f"node_id = {quote(node_id)}")
            .limit(1)
            .to_pydantic(self.store.NodeVectorRecord)
        )
        if not results:
            return None

        vector = [float(v) for v in results[0].vector]
        self.store.check_vector(vector, context=f"Stored embedding of node {node_id}")
        return vector

    async def list_all(self) -> dict[str, list[float]]:
        """Return every stored embedding keyed by node id."""
        results = full_scan(self.store.vectors_table).to_pydantic(
            self.store.NodeVectorRecord
        )
        return {record.node_id: [float(v) for v in record.vector] for record in results}

    async def delete(self, node_id: str) -> None:
        self.store.vectors_table.delete(f"node_id = {quote(node_id)}")

    async def top_similar(
        self,
        vector: Sequence[float],
        exclude_id: str | None,
        k: int,
        min_score: float,
    ) -> list[SimilarNode]:
        """Find the k most similar embedded nodes by cosine similarity.

        Args:
            vector: Query embedding.
            exclude_id: Node to leave out of the results (the querying node).
            k: Maximum number of results.
            min_score: Only results with score strictly above this are returned.

        Returns:
            SimilarNode hits ordered by descending score.
        """
        self.store.check_vector(vector, context="Query vector")
        if k <= 0 or self.store.vectors_table.count_rows() == 0:
            return []

        query = self.store.vectors_table.search(
            [float(v) for v in vector],
            query_type="vector",
            vector_column_name="vector",
        ).distance_type("cosine")
        if exclude_id is not None:
            query = query.where(f"node_id != {quote(exclude_id)}", prefilter=True)

        rows = query.limit(k + 1).to_list()

        hits: list[SimilarNode] = []
        for row in rows:
            node_id = str(row["node_id"])
            if node_id == exclude_id:
                continue
            distance = row.get("_distance")
            if distance is None or math.isnan(distance):
                score = 0.0
            else:
                score = 1.0 - float(distance)
            if score > min_score:
                hits.append(SimilarNode(node_id=node_id, score=score))

        hits.sort(key=lambda hit: hit.score, reverse=True)
        return hits[:k]

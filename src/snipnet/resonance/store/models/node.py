from datetime import datetime

from pydantic import BaseModel, Field


class Node(BaseModel):
    """
    Represents a content node whose text is embedded and compared for resonance.
    """

    id: str | None = None
    title: str
    body: str = ""
    aggregate_score: float = 0.0
    embedding: list[float] | None = None
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)


class SimilarNode(BaseModel):
    """A nearest-neighbour hit from the vector store."""

    node_id: str
    score: float

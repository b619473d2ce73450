from enum import Enum

from pydantic import BaseModel, Field, computed_field


class ClusterStrength(str, Enum):
    COSMIC = "cosmic"
    STRONG = "strong"
    MODERATE = "moderate"
    WEAK = "weak"


def strength_for(score: float) -> ClusterStrength:
    """Label an average resonance score."""
    if score > 0.85:
        return ClusterStrength.COSMIC
    if score > 0.75:
        return ClusterStrength.STRONG
    if score > 0.65:
        return ClusterStrength.MODERATE
    return ClusterStrength.WEAK


class Cluster(BaseModel):
    """A group of strongly resonating nodes. Derived, never persisted."""

    id: str
    theme: str
    member_ids: list[str]
    average_score: float
    total_score: float
    keywords: list[str] = Field(default_factory=list)
    top_member_ids: list[str] = Field(default_factory=list)

    @computed_field
    @property
    def strength(self) -> ClusterStrength:
        return strength_for(self.average_score)

    @property
    def size(self) -> int:
        return len(self.member_ids)


class ClusterNetworkStats(BaseModel):
    total_clusters: int = 0
    total_connections: int = 0
    most_active_cluster: str = "None"
    strongest_resonance: float = 0.0

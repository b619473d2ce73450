import json
import logging
from pathlib import Path
from uuid import uuid4

import lancedb
from lancedb.pydantic import LanceModel, Vector
from pydantic import Field

from snipnet.resonance.config import AppConfig, Config
from snipnet.resonance.exceptions import DimensionMismatchError

logger = logging.getLogger(__name__)


class NodeRecord(LanceModel):
    id: str = Field(default_factory=lambda: str(uuid4()))
    title: str
    body: str = ""
    aggregate_score: float = 0.0
    created_at: str = Field(default_factory=lambda: "")
    updated_at: str = Field(default_factory=lambda: "")


def create_vector_model(vector_dim: int):
    """Create a NodeVectorRecord model with the specified vector dimension."""

    class NodeVectorRecord(LanceModel):
        node_id: str
        vector: Vector(vector_dim) = Field(default_factory=list)  # type: ignore

    return NodeVectorRecord


class EdgeRecord(LanceModel):
    id: str = Field(default_factory=lambda: str(uuid4()))
    node_a: str
    node_b: str
    pair_key: str
    score: float
    thinking: str = ""
    explanation: str = ""
    created_at: str = Field(default_factory=lambda: "")


class SettingsRecord(LanceModel):
    id: str = Field(default="settings")
    settings: str = Field(default="{}")


def quote(value: str) -> str:
    """Quote a string literal for a LanceDB where clause."""
    return "'" + value.replace("'", "''") + "'"


def full_scan(table, where: str | None = None):
    """Query builder over every row of table matching where.

    Plain LanceDB queries are limited by default, so the limit is raised to
    the current row count.
    """
    query = table.search()
    if where is not None:
        query = query.where(where)
    return query.limit(max(table.count_rows(), 1))


class Store:
    def __init__(
        self,
        db_path: Path,
        config: AppConfig = Config,
        create: bool = False,
    ):
        self.db_path: Path = db_path
        self._config = config
        self.vector_dim: int = config.embeddings.model.vector_dim

        if not create and not db_path.exists():
            raise FileNotFoundError(
                f"Database not found at {db_path}. Create it first."
            )

        # Create the NodeVectorRecord model with the correct vector dimension
        self.NodeVectorRecord = create_vector_model(self.vector_dim)

        self.db = lancedb.connect(db_path)
        self.create_or_update_db()
        self.validate_vector_dim()

    def create_or_update_db(self):
        """Create the database tables."""
        existing_tables = self.db.table_names()

        if "nodes" in existing_tables:
            self.nodes_table = self.db.open_table("nodes")
        else:
            self.nodes_table = self.db.create_table("nodes", schema=NodeRecord)

        if "node_vectors" in existing_tables:
            self.vectors_table = self.db.open_table("node_vectors")
        else:
            self.vectors_table = self.db.create_table(
                "node_vectors", schema=self.NodeVectorRecord
            )

        if "edges" in existing_tables:
            self.edges_table = self.db.open_table("edges")
        else:
            self.edges_table = self.db.create_table("edges", schema=EdgeRecord)

        if "settings" in existing_tables:
            self.settings_table = self.db.open_table("settings")
        else:
            self.settings_table = self.db.create_table(
                "settings", schema=SettingsRecord
            )
            self.settings_table.add(
                [
                    SettingsRecord(
                        id="settings", settings=json.dumps(self._settings_snapshot())
                    )
                ]
            )

    def _settings_snapshot(self) -> dict:
        embedding_model = self._config.embeddings.model
        return {
            "embeddings": {
                "provider": embedding_model.provider,
                "name": embedding_model.name,
                "vector_dim": embedding_model.vector_dim,
            }
        }

    def get_settings(self) -> dict:
        """Return the settings the database was created with."""
        records = list(
            self.settings_table.search()
            .where("id = 'settings'")
            .limit(1)
            .to_pydantic(SettingsRecord)
        )
        if not records or not records[0].settings:
            return {}
        return json.loads(records[0].settings)

    def validate_vector_dim(self) -> None:
        """Fail fast when the database was built with a different dimension.

        Raises:
            DimensionMismatchError: If stored and configured dimensions differ.
        """
        stored = self.get_settings().get("embeddings", {}).get("vector_dim")
        if stored is not None and int(stored) != self.vector_dim:
            raise DimensionMismatchError(
                self.vector_dim, int(stored), context="Database vectors"
            )

    def check_vector(self, vector, context: str = "vector") -> None:
        """Raise DimensionMismatchError unless vector has the store's dimension."""
        if len(vector) != self.vector_dim:
            raise DimensionMismatchError(self.vector_dim, len(vector), context=context)

    def close(self):
        """Close the database connection."""
        # LanceDB connections are automatically managed
        pass

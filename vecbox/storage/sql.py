"""
SQL text for the two vecbox tables.

Every statement the store issues is built here so table names and
placeholder style live in one place. Table names are derived from the
configured database_name, which StoreSpec restricts to identifier
characters; values are always bound as parameters, never formatted in.
"""

VECTOR_PLACEHOLDERS = 2    # id, vector
METADATA_PLACEHOLDERS = 4  # id, key, value, vector_id


class SqlCommandProvider:
    """Builds DDL, INSERT and SELECT text for one table namespace."""

    def __init__(self, database_name: str, overwrite_existing_tables: bool = False,
                 placeholder: str = "%s"):
        self.database_name = database_name
        self.overwrite_existing_tables = overwrite_existing_tables
        self.placeholder = placeholder

    @property
    def vectors_table(self) -> str:
        return f"{self.database_name}_vectors"

    @property
    def metadata_table(self) -> str:
        return f"{self.database_name}_metadata"

    def group(self, size: int) -> str:
        """One VALUES tuple: '(%s, %s)' for size 2."""
        return "(" + ", ".join([self.placeholder] * size) + ")"

    # ------------------------------------------------------------------
    # DDL
    # ------------------------------------------------------------------

    def drop_tables(self) -> list[str]:
        """DROP statements when overwriting, metadata before vectors; else none."""
        if not self.overwrite_existing_tables:
            return []
        return [
            f"DROP TABLE IF EXISTS {self.metadata_table}",
            f"DROP TABLE IF EXISTS {self.vectors_table}",
        ]

    def create_vectors_table(self, dimensions: int) -> str:
        return (
            f"CREATE TABLE IF NOT EXISTS {self.vectors_table} ("
            f"id TEXT PRIMARY KEY, vector VECTOR({int(dimensions)}))"
        )

    def create_metadata_table(self) -> str:
        return (
            f"CREATE TABLE IF NOT EXISTS {self.metadata_table} ("
            f"id TEXT, key TEXT, value TEXT, vector_id TEXT)"
        )

    def schema_statements(self, dimensions: int) -> list[str]:
        """Every DROP first, then both CREATEs."""
        return self.drop_tables() + [
            self.create_vectors_table(dimensions),
            self.create_metadata_table(),
        ]

    # ------------------------------------------------------------------
    # DML
    # ------------------------------------------------------------------

    def insert_vectors(self, vector_parameters: str) -> str:
        return f"INSERT INTO {self.vectors_table} (id, vector) VALUES {vector_parameters}"

    def insert_metadata(self, metadata_parameters: str) -> str:
        return (
            f"INSERT INTO {self.metadata_table} (id, key, value, vector_id) "
            f"VALUES {metadata_parameters}"
        )

    def select_nearest(self, distance_syntax: str) -> str:
        """
        Nearest vectors joined with their metadata.

        The LIMIT applies inside the subquery, so it bounds vector rows; the
        LEFT JOIN fans each one out to one row per metadata entry (or a single
        row with NULL key/value when it has none). Rows for one vector stay
        adjacent because the outer sort breaks distance ties on id.

        Parameters: query vector, top_k.
        """
        return (
            f"SELECT v.id, v.vector, m.key, m.value "
            f"FROM (SELECT id, vector, {distance_syntax} AS distance "
            f"FROM {self.vectors_table} "
            f"ORDER BY distance LIMIT {self.placeholder}) AS v "
            f"LEFT JOIN {self.metadata_table} AS m ON m.vector_id = v.id "
            f"ORDER BY v.distance, v.id"
        )

    def count_rows(self, table: str) -> str:
        return f"SELECT COUNT(*) FROM {table}"

"""Table bootstrap for a fresh store.

Creates the markets table and one table per pulse kind if they do not exist.
Existing tables are never altered.

Table Schemas:
  markets:
    - id: TEXT PRIMARY KEY
    - name: TEXT NOT NULL
    - symbol: TEXT NOT NULL UNIQUE
    - market_type: TEXT NOT NULL
    - description: TEXT
    - created_at: TIMESTAMPTZ

  <kind>_pulses (one per PulseKind):
    - id: TEXT PRIMARY KEY
    - market_id: TEXT NOT NULL REFERENCES markets(id)
    - timestamp: TIMESTAMPTZ NOT NULL
    - one DOUBLE PRECISION column per numeric field
    - one JSONB column per annotation field
    - INDEX (market_id, timestamp DESC)
"""

from market_pulse.infrastructure.database.ports import IDatabaseAdapter
from market_pulse.infrastructure.observability import get_storage_logger
from market_pulse.storage.schemas.pulses import PULSE_SCHEMAS, PulseSchema

log = get_storage_logger("ddl")

COLUMN_TYPES = {
    "postgresql": {"timestamp": "TIMESTAMPTZ", "number": "DOUBLE PRECISION", "json": "JSONB"},
    "sqlite": {"timestamp": "TEXT", "number": "REAL", "json": "TEXT"},
}


def markets_ddl(backend: str) -> list[str]:
    types = COLUMN_TYPES[backend]
    return [
        f"""
        CREATE TABLE IF NOT EXISTS markets (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            symbol TEXT NOT NULL UNIQUE,
            market_type TEXT NOT NULL,
            description TEXT,
            created_at {types['timestamp']}
        )
        """,
        "CREATE INDEX IF NOT EXISTS ix_markets_name ON markets (name)",
    ]


def pulse_ddl(schema: PulseSchema, backend: str) -> list[str]:
    types = COLUMN_TYPES[backend]
    columns = [
        "id TEXT PRIMARY KEY",
        "market_id TEXT NOT NULL REFERENCES markets(id)",
        f"timestamp {types['timestamp']} NOT NULL",
    ]
    for spec in schema.fields:
        if spec.annotation:
            columns.append(f"{spec.name} {types['json']}")
        else:
            columns.append(f"{spec.name} {types['number']} NOT NULL")

    body = ",\n            ".join(columns)
    return [
        f"""
        CREATE TABLE IF NOT EXISTS {schema.table} (
            {body}
        )
        """,
        f"CREATE INDEX IF NOT EXISTS ix_{schema.table}_market_ts "
        f"ON {schema.table} (market_id, timestamp DESC)",
    ]


async def create_tables(db: IDatabaseAdapter) -> None:
    """Create all tables and indexes that do not exist yet."""
    statements = markets_ddl(db.backend)
    for schema in PULSE_SCHEMAS.values():
        statements.extend(pulse_ddl(schema, db.backend))

    for statement in statements:
        await db.execute(statement)
    log.info("tables_ready", backend=db.backend, pulse_tables=len(PULSE_SCHEMAS))

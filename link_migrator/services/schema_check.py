from __future__ import annotations

from sqlalchemy import inspect

from link_migrator import db
from link_migrator.tables import HostTables


class MissingTableError(RuntimeError):
    pass


def _existing_tables() -> set[str]:
    return set(inspect(db.engine).get_table_names())


def ensure_tables(tables: HostTables, *, legacy: bool = False, logger=None) -> None:
    """Raise MissingTableError unless the tables a pass needs exist.

    The schema pass only needs `fields`; the content pass also reads
    elements, layouts, element content and the legacy link table.
    """
    required = [tables.fields]
    if legacy:
        required += [
            tables.elements,
            tables.elements_sites,
            tables.fieldlayouts,
            tables.legacy_links,
        ]

    existing = _existing_tables()
    missing = [table.name for table in required if table.name not in existing]
    if missing:
        raise MissingTableError(
            "Required tables not found: "
            + ", ".join(missing)
            + ". Check DATABASE_URL and DB_TABLE_PREFIX."
        )
    if logger:
        logger.info("Preflight ok: %s", ", ".join(t.name for t in required))

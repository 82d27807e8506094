"""Write the SQL emitted by PartnerStore queries to sql/partner_store.sql.

The file is a review aid: it shows the exact query shape for each store
operation, rendered for PostgreSQL.  Run it after changing a statement
and commit the result alongside the code.

Usage:
    uv run python scripts/generate_sql.py           # rewrite the file
    uv run python scripts/generate_sql.py --check   # fail if it is stale
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from sqlalchemy.dialects import postgresql

from partnerstore.store import PartnerStore
from partnerstore.types import PartnerDirection, PartnerIds

ROOT = Path(__file__).resolve().parent.parent
OUTPUT = ROOT / "sql" / "partner_store.sql"

DUMMY_UUID = "00000000-0000-4000-a000-000000000000"
DUMMY_IDS = PartnerIds(shared_by_id=DUMMY_UUID, shared_with_id=DUMMY_UUID)


def render(stmt: object) -> str:
    compiled = stmt.compile(dialect=postgresql.dialect())  # type: ignore[attr-defined]
    return str(compiled).strip() + ";"


def build() -> str:
    store = PartnerStore()
    samples = [
        ("PartnerStore.list_for_user", store.list_statement(DUMMY_UUID)),
        (
            "PartnerStore.list_for_user (shared-by)",
            store.list_statement(DUMMY_UUID, PartnerDirection.SHARED_BY),
        ),
        (
            "PartnerStore.list_for_user (shared-with)",
            store.list_statement(DUMMY_UUID, PartnerDirection.SHARED_WITH),
        ),
        ("PartnerStore.get", store.get_statement(DUMMY_IDS)),
        ("PartnerStore.update", store.update_statement(DUMMY_IDS, {"in_timeline": True})),
        ("PartnerStore.remove", store.delete_statement(DUMMY_IDS)),
    ]
    parts = ["-- NOTE: This file is auto generated by scripts/generate_sql.py", ""]
    for name, stmt in samples:
        parts.append(f"-- {name}")
        parts.append(render(stmt))
        parts.append("")
    return "\n".join(parts)


def main() -> None:
    parser = argparse.ArgumentParser(description="Generate PartnerStore SQL samples")
    parser.add_argument("--check", action="store_true", help="exit 1 if the file is stale")
    args = parser.parse_args()

    text = build()
    if args.check:
        current = OUTPUT.read_text() if OUTPUT.exists() else ""
        if current != text:
            print(f"error: {OUTPUT.relative_to(ROOT)} is out of date", file=sys.stderr)
            sys.exit(1)
        return

    OUTPUT.parent.mkdir(parents=True, exist_ok=True)
    OUTPUT.write_text(text)
    print(f"wrote {OUTPUT.relative_to(ROOT)}")


if __name__ == "__main__":
    main()

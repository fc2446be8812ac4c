#!/usr/bin/env python3
"""Seed the library store with demo users and books.

Behavior
--------
Idempotent. Creates the schema if needed, inserts any demo user or book
that is not present yet (books matched on title/author, case-insensitive),
reloads the catalog cache and prints a JSON summary to stdout.

Environment Variables
---------------------
BOOKREC_DB_URL / BOOKREC_DB_PATH -> target store (see bookrec.config)

Exit Codes
----------
0 success (including "nothing to do")
2 store unavailable or seeding transaction failed
"""
from __future__ import annotations

import argparse
import json
import sys

from sqlalchemy.exc import SQLAlchemyError

from bookrec.db.engine import Store
from bookrec.errors import LibraryError
from bookrec.startup.seed import seed_demo_data
from bookrec.startup.wiring import build_engine


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--db-url", help="SQLAlchemy URL overriding BOOKREC_DB_URL")
    args = parser.parse_args(argv)

    store = Store(args.db_url) if args.db_url else None
    try:
        if store is not None:
            store.create_schema()
        engine = build_engine(store)
        summary = seed_demo_data(engine)
    except (LibraryError, SQLAlchemyError) as exc:
        detail = getattr(exc, "detail", None) or ""
        print(f"[LIB-SEED] FATAL: {exc} {detail}".rstrip(), file=sys.stderr)
        return 2
    print(json.dumps(summary, indent=2, sort_keys=True))
    return 0


if __name__ == "__main__":
    sys.exit(main())

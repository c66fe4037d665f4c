#!/usr/bin/env python3
"""
Create the storefront tables on the configured database

Only missing tables are created; existing tables are left as they are.

Usage:
    export DATABASE_URL="postgresql://..."
    python3 backend/scripts/create_schema.py
"""
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy import inspect

import app.models  # noqa: F401
from app.core.database import Base, engine


def main():
    existing = set(inspect(engine).get_table_names())
    missing = [name for name in Base.metadata.tables if name not in existing]

    if not missing:
        print("✅ Schema is up to date")
        return

    print(f"📦 Creating tables: {', '.join(missing)}")
    Base.metadata.create_all(engine)
    print("✅ Done")


if __name__ == "__main__":
    main()

#!/usr/bin/env python3
"""
Load a catalogue JSON file into the mock upstream catalogue.

Entries are upserted by id; their position in the file becomes the upstream
popularity rank. Pin flags in the file overwrite the stored ones.

Usage:
    python scripts/seed_products.py --file ../public/mock/catalogue.json
    python scripts/seed_products.py --reset
"""
import argparse
import os
import sys

# allow running from repo/scripts
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from storefront.db import SessionLocal, init_db
from storefront.repositories.product_repo import ProductRepository
from storefront.seed import DEFAULT_SOURCE, load_catalogue


def seed_from_file(path: str) -> int:
    if not os.path.exists(path):
        raise FileNotFoundError(path)

    entries = load_catalogue(path)

    db = SessionLocal()
    repo = ProductRepository(db)
    try:
        for rank, entry in enumerate(entries, start=1):
            repo.create_or_update(rank=rank, **entry)
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
    return len(entries)


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument("--file", "-f", default=DEFAULT_SOURCE, help="Path to catalogue json (list of product entries)")
    parser.add_argument("--reset", action="store_true", help="Drop and recreate the catalogue tables first")
    args = parser.parse_args()
    if not os.path.exists(args.file):
        print("File not found:", args.file)
        sys.exit(1)
    init_db(reset=args.reset, seed=False)
    print("Seeded products:", seed_from_file(args.file))

"""Load the demo projects into the configured database.

Existing projects, layers and media are deleted first.
"""
from __future__ import annotations

import logging

from masterplan.db import Base, SessionLocal, engine
from masterplan.seed import clear_all, seed_los_alamos, seed_torre_norte


def main() -> int:
    logging.basicConfig(level=logging.INFO)
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        clear_all(db)
        for project in (seed_los_alamos(db), seed_torre_norte(db)):
            print(f"Seeded {project.slug} ({len(project.layers)} layers)")
    finally:
        db.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

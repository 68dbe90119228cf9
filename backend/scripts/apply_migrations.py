"""Apply pending SQL migrations from backend/migrations in filename order.

Usage: python scripts/apply_migrations.py [--dry-run]
"""

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path

BACKEND_ROOT = Path(__file__).resolve().parent.parent
sys.path.append(str(BACKEND_ROOT))

from app.infra.postgres import close_pool, init_pool  # noqa: E402
from app.obs.logging import configure_logging  # noqa: E402

MIGRATIONS_DIR = BACKEND_ROOT / "migrations"

logger = logging.getLogger("campus_connect.migrations")


def pending_files(applied: set[str]) -> list[Path]:
	return [path for path in sorted(MIGRATIONS_DIR.glob("*.sql")) if path.name not in applied]


async def apply_migrations(dry_run: bool = False) -> int:
	pool = await init_pool()
	try:
		async with pool.acquire() as conn:
			await conn.execute(
				"""
				CREATE TABLE IF NOT EXISTS schema_migrations (
					filename TEXT PRIMARY KEY,
					applied_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
				)
				"""
			)
			rows = await conn.fetch("SELECT filename FROM schema_migrations")
			todo = pending_files({row["filename"] for row in rows})
			for path in todo:
				if dry_run:
					logger.info("migration pending", extra={"migration": path.name})
					continue
				async with conn.transaction():
					await conn.execute(path.read_text(encoding="utf-8"))
					await conn.execute("INSERT INTO schema_migrations (filename) VALUES ($1)", path.name)
				logger.info("migration applied", extra={"migration": path.name})
		return len(todo)
	finally:
		await close_pool()


def main() -> None:
	parser = argparse.ArgumentParser(description=__doc__)
	parser.add_argument("--dry-run", action="store_true", help="list pending migrations without applying them")
	args = parser.parse_args()
	configure_logging()
	if sys.platform == "win32":
		asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())
	count = asyncio.run(apply_migrations(dry_run=args.dry_run))
	logger.info("migrations finished", extra={"count": count, "dry_run": args.dry_run})


if __name__ == "__main__":
	os.chdir(BACKEND_ROOT)
	main()

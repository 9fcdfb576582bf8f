#!/usr/bin/env python3
"""
Remove duplicate bookings: keeps the oldest booking per (email, experience, slot).

Deleted bookings that were still confirmed give their spot back to the slot in
the same transaction. Run with --dry-run first to see what would go:
  python backend/scripts/clean_duplicate_bookings.py --dry-run
"""
import argparse
import asyncio
import sys

from bookit.database import async_session, engine
from bookit.infrastructure.unit_of_work import SqlAlchemyUnitOfWork
from bookit.usecases.maintenance import purge_duplicate_bookings


async def run(dry_run: bool) -> int:
    try:
        async with async_session() as session:
            async with SqlAlchemyUnitOfWork(session) as uow:
                report = await purge_duplicate_bookings(uow, dry_run=dry_run)
    finally:
        await engine.dispose()

    print(f"Scanned {report.scanned} bookings")
    if not report.deleted:
        print("No duplicate bookings found")
        return 0
    verb = "Would delete" if dry_run else "Deleted"
    print(f"{verb} {len(report.deleted)} duplicate bookings:")
    for confirmation_number in report.deleted:
        print(f"  {confirmation_number}")
    if not dry_run:
        print(f"Released {report.released} slot spots")
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--dry-run", action="store_true", help="report duplicates without deleting them")
    args = parser.parse_args()
    try:
        sys.exit(asyncio.run(run(args.dry_run)))
    except Exception as e:
        print(f"Error during cleanup: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()

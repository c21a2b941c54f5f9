#!/usr/bin/env python
"""
Delete rides whose departure time has passed.

Meant to be run from cron or a scheduled job against the Supabase backend.
Exits non-zero if any expired ride could not be deleted, so the scheduler
reports the failure; the next run retries those rides.

Usage:
    uv run python run_cleanup.py
    uv run python run_cleanup.py --dry-run     # List expired rides only
"""

import argparse
import asyncio
import logging
import sys

from rich.console import Console
from rich.table import Table

from api.dependencies import get_container
from modules.rides.repository import RideRepository
from shared.clock import utc_now
from shared.exceptions import GoRidesError

console = Console()


async def list_expired() -> None:
    repo = RideRepository(get_container().document_store)
    expired = await repo.list_expired(utc_now())

    if not expired:
        console.print("[dim]No expired rides.[/dim]")
        return

    table = Table(title="Expired Rides")
    table.add_column("Ride", style="cyan")
    table.add_column("Owner")
    table.add_column("Departed")
    table.add_column("Route")
    for ride in expired:
        table.add_row(
            ride.id,
            ride.owner_email,
            ride.departure_time.strftime("%Y-%m-%d %H:%M"),
            f"{ride.start_location} -> {ride.destination}",
        )
    console.print(table)


async def cleanup() -> int:
    result = await get_container().rides.cleanup_expired()

    console.print(f"[green]Removed {result.removed} expired ride(s)[/green]")
    if result.failed_ids:
        console.print(f"[red]Failed to remove {len(result.failed_ids)} ride(s):[/red]")
        for ride_id in result.failed_ids:
            console.print(f"  - {ride_id}")
        return 1
    return 0


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Delete rides that have departed")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="List expired rides without deleting them",
    )
    args = parser.parse_args()

    settings = get_container().settings
    logging.basicConfig(level=settings.log_level.upper())

    console.print("[bold]UW Go Rides Cleanup[/bold]")
    console.print()

    try:
        if args.dry_run:
            asyncio.run(list_expired())
            return
        sys.exit(asyncio.run(cleanup()))
    except GoRidesError as e:
        console.print(f"[red]Cleanup failed:[/red] {e.message}")
        sys.exit(1)


if __name__ == "__main__":
    main()

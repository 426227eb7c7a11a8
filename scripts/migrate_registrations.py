"""
Run the registration migration from the command line.

Moves users/{userId}/registrations/* to events/{eventId}/registrations/{userId},
normalizing status values and deleting the originals.

Usage:
  python scripts/migrate_registrations.py --dry-run
  python scripts/migrate_registrations.py --project-id my-project
"""

import sys
from typing import Optional

import click

from app.core.config import settings
from app.core.database import FirestoreClient
from app.repositories.registration import RegistrationRepository
from app.services.migration import MigrationAborted, RegistrationMigrationService


@click.command()
@click.option("--dry-run", is_flag=True, default=False, help="Report what would move without writing or deleting")
@click.option("--project-id", default=None, help="Firebase project ID (defaults to FIREBASE_PROJECT_ID)")
def main(dry_run: bool, project_id: Optional[str]) -> None:
    run_settings = settings.model_copy(update={"firebase_project_id": project_id}) if project_id else settings
    click.echo(f"Project={run_settings.firebase_project_id} Emulator={run_settings.firestore_emulator_host}")

    with FirestoreClient(run_settings) as db:
        service = RegistrationMigrationService(RegistrationRepository(db, run_settings))
        try:
            result = service.run(dry_run=dry_run)
        except MigrationAborted as e:
            click.echo(f"Error: {e}", err=True)
            click.echo(
                f"Stopped after {e.result.migrated} migrated, {e.result.deleted} deleted",
                err=True,
            )
            sys.exit(1)

    prefix = "[dry-run] " if dry_run else ""
    click.echo(
        f"{prefix}Migrated {result.migrated} registrations, deleted {result.deleted}, "
        f"skipped {result.skipped} ({result.duration_seconds}s)"
    )


if __name__ == "__main__":
    main()

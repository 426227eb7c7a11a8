"""
Registration migration service
Moves users/{userId}/registrations/* to events/{eventId}/registrations/{userId}
"""
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from app.models.registration import EventRegistration, InvalidRegistration
from app.repositories.registration import RegistrationRepository
from app.utils.logger import get_logger, format_fields


logger = get_logger(__name__)

_run_lock = threading.Lock()


class MigrationInProgress(Exception):
    """Another run holds the migration lock"""

    def __init__(self):
        super().__init__("Migration already in progress")


class MigrationAborted(Exception):
    """A store operation failed and the run stopped.

    ``str()`` is the original error's message; ``result`` holds the counts
    reached before the failure.
    """

    def __init__(self, cause: Exception, result: "MigrationResult"):
        super().__init__(str(cause))
        self.cause = cause
        self.result = result


@dataclass
class MigrationResult:
    migrated: int = 0
    deleted: int = 0
    skipped: int = 0
    dry_run: bool = False
    started_at: datetime = field(default_factory=datetime.utcnow)
    finished_at: Optional[datetime] = None
    duration_seconds: float = 0.0

    def as_log_fields(self) -> dict:
        return {"migrated": self.migrated, "deleted": self.deleted, "skipped": self.skipped}


class RegistrationMigrationService:
    def __init__(self, repository: RegistrationRepository):
        self.repository = repository

    def run(self, dry_run: bool = False) -> MigrationResult:
        """Migrate every legacy registration; raises MigrationInProgress if a run is active"""
        if not _run_lock.acquire(blocking=False):
            raise MigrationInProgress()
        try:
            return self._run(dry_run)
        finally:
            _run_lock.release()

    def _run(self, dry_run: bool) -> MigrationResult:
        result = MigrationResult(dry_run=dry_run)
        start = time.time()
        logger.info(f"Starting registration migration (dry_run={dry_run})")

        try:
            for legacy in self.repository.iter_legacy_registrations():
                try:
                    registration = EventRegistration.from_legacy(legacy)
                except InvalidRegistration as invalid:
                    fields = {"registration_id": invalid.registration_id, "user_id": invalid.user_id}
                    logger.warning(
                        f"Skipping invalid registration: {invalid.registration_id} ({format_fields(fields)})",
                        extra=fields,
                    )
                    result.skipped += 1
                    continue

                if dry_run:
                    logger.info(
                        f"[dry-run] Would move {legacy.user_id}/{legacy.registration_id} "
                        f"to event {registration.event_id} with status {registration.status}"
                    )
                    result.migrated += 1
                    continue

                self.repository.save_event_registration(registration)
                # Source is only removed once the copy is written
                self.repository.delete_legacy_registration(legacy)
                result.migrated += 1
                result.deleted += 1

        except Exception as e:
            self._finish(result, start)
            fields = {"error": str(e), **result.as_log_fields()}
            logger.error(f"Migration error: {e} ({format_fields(fields)})", extra=fields, exc_info=True)
            raise MigrationAborted(e, result) from e

        self._finish(result, start)
        fields = result.as_log_fields()
        logger.info(
            f"Migration complete: {result.migrated} registrations moved, "
            f"{result.deleted} old records deleted.",
            extra=fields,
        )
        return result

    @staticmethod
    def _finish(result: MigrationResult, start: float) -> None:
        result.finished_at = datetime.utcnow()
        result.duration_seconds = round(time.time() - start, 4)

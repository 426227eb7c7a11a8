"""
Migration API Endpoints
HTTP trigger for the registration migration
"""
from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import PlainTextResponse

from app.core.config import settings
from app.core.database import FirestoreClient
from app.repositories.registration import RegistrationRepository
from app.services.migration import (
    MigrationAborted,
    MigrationInProgress,
    RegistrationMigrationService,
)
from app.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/migrations", tags=["Migrations"])


def get_migration_service(request: Request) -> RegistrationMigrationService:
    """Build the service on the store handle opened by the app lifespan"""
    store: FirestoreClient = request.app.state.firestore
    return RegistrationMigrationService(RegistrationRepository(store.db, settings))


# Sync handler: the Firestore client blocks, FastAPI runs this in its threadpool
def migrate_registrations(
    service: RegistrationMigrationService = Depends(get_migration_service),
) -> PlainTextResponse:
    """Move every user registration under its event"""
    try:
        result = service.run()
    except MigrationInProgress as e:
        logger.warning(f"Rejected migration trigger: {e}")
        return PlainTextResponse(f"Error: {e}", status_code=status.HTTP_409_CONFLICT)
    except MigrationAborted as e:
        return PlainTextResponse(
            f"Error: {e}", status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    return PlainTextResponse(
        f"Success! Migrated {result.migrated} registrations. Check Firebase console for details.",
        status_code=status.HTTP_200_OK,
    )


router.add_api_route(
    "/registrations",
    migrate_registrations,
    methods=["GET", "POST"],
    response_class=PlainTextResponse,
    summary="Migrate Registrations",
    description="Copy users/{userId}/registrations into events/{eventId}/registrations and delete the originals.",
)

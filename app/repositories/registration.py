from typing import Iterator, List, Optional

from google.cloud import firestore

from app.core.config import Settings, settings as default_settings
from app.models.registration import EventRegistration, LegacyRegistration


class RegistrationRepository:
    """Reads legacy registrations and writes event registrations.

    Store errors are not caught here; the caller decides whether a failure
    aborts the run.
    """

    def __init__(self, db: firestore.Client, settings: Optional[Settings] = None):
        self.db = db
        self.settings = settings or default_settings

    def _users(self):
        return self.db.collection(self.settings.users_collection)

    def _legacy_registrations(self, user_id: str):
        return (
            self._users()
            .document(user_id)
            .collection(self.settings.registrations_collection)
        )

    def _event_registrations(self, event_id: str):
        return (
            self.db.collection(self.settings.events_collection)
            .document(event_id)
            .collection(self.settings.registrations_collection)
        )

    def list_user_ids(self) -> List[str]:
        """IDs of every user document"""
        return [snapshot.id for snapshot in self._users().stream()]

    def list_legacy_registrations(self, user_id: str) -> List[LegacyRegistration]:
        """Registrations still stored under the user"""
        return [
            LegacyRegistration.from_snapshot(user_id, snapshot)
            for snapshot in self._legacy_registrations(user_id).stream()
        ]

    def iter_legacy_registrations(self) -> Iterator[LegacyRegistration]:
        # Users are read up front so deletes below don't race the listing
        for user_id in self.list_user_ids():
            for registration in self.list_legacy_registrations(user_id):
                yield registration

    def save_event_registration(self, registration: EventRegistration) -> None:
        """Write (or overwrite) events/{event_id}/registrations/{user_id}"""
        self._event_registrations(registration.event_id).document(
            registration.user_id
        ).set(registration.to_document())

    def delete_legacy_registration(self, registration: LegacyRegistration) -> None:
        self._legacy_registrations(registration.user_id).document(
            registration.registration_id
        ).delete()

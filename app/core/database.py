import os
from typing import Optional

import firebase_admin
from firebase_admin import credentials, firestore as admin_firestore
from google.auth.credentials import AnonymousCredentials
from google.cloud import firestore

from app.core.config import Settings, settings as default_settings
from app.utils.logger import get_logger


logger = get_logger(__name__)

EMULATOR_ENV = "FIRESTORE_EMULATOR_HOST"


class FirestoreClient:
    """Firestore handle owned by whoever opens it.

    The application opens one instance in its lifespan and closes it on
    shutdown; the CLI does the same around a single run.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or default_settings
        self._app: Optional[firebase_admin.App] = None
        self._db: Optional[firestore.Client] = None
        self._emulator_env_set = False
        self._previous_emulator_host: Optional[str] = None

    @property
    def db(self) -> firestore.Client:
        if self._db is None:
            raise RuntimeError("Firestore client is not open")
        return self._db

    @property
    def is_open(self) -> bool:
        return self._db is not None

    def open(self) -> firestore.Client:
        """Connect to Firestore (emulator when configured)"""
        if self._db is not None:
            return self._db

        if self.settings.firestore_emulator_host:
            # Emulator chấp nhận credentials ẩn danh; env is restored in close()
            self._previous_emulator_host = os.environ.get(EMULATOR_ENV)
            self._emulator_env_set = True
            os.environ[EMULATOR_ENV] = self.settings.firestore_emulator_host
            self._db = firestore.Client(
                project=self.settings.firebase_project_id or "demo-project",
                credentials=AnonymousCredentials(),
            )
            logger.info(f"Connected to Firestore emulator at {self.settings.firestore_emulator_host}")
            return self._db

        if self.settings.firebase_credentials_path:
            cred = credentials.Certificate(self.settings.firebase_credentials_path)
        else:
            cred = credentials.ApplicationDefault()

        options = {}
        if self.settings.firebase_project_id:
            options["projectId"] = self.settings.firebase_project_id

        self._app = firebase_admin.initialize_app(
            cred, options, name=self.settings.firebase_app_name
        )
        self._db = admin_firestore.client(app=self._app)
        logger.info(f"Connected to Firestore project {self._db.project}")
        return self._db

    def close(self) -> None:
        """Release the client and the firebase app"""
        if self._db is not None:
            self._db.close()
            self._db = None
        if self._app is not None:
            firebase_admin.delete_app(self._app)
            self._app = None
        if self._emulator_env_set:
            if self._previous_emulator_host is None:
                os.environ.pop(EMULATOR_ENV, None)
            else:
                os.environ[EMULATOR_ENV] = self._previous_emulator_host
            self._emulator_env_set = False
            self._previous_emulator_host = None
        logger.info("Firestore client closed")

    def __enter__(self) -> firestore.Client:
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

"""Lifecycle owner for the Firebase Admin app shared by auth and storage."""
import logging
from datetime import timedelta

import firebase_admin
from firebase_admin import credentials, storage

from app.core.config import Settings
from app.services.identity import FirebaseIdentityVerifier
from app.services.storage import FirebaseObjectStore

logger = logging.getLogger(__name__)


class FirebaseClient:
    """Explicitly constructed Firebase handle; created and torn down by the app lifespan."""

    def __init__(self, settings: Settings, name: str = "[DEFAULT]") -> None:
        self.settings = settings
        self.name = name
        self._app: firebase_admin.App | None = None
        self._verifier: FirebaseIdentityVerifier | None = None
        self._store: FirebaseObjectStore | None = None

    @property
    def app(self) -> firebase_admin.App:
        if self._app is None:
            raise RuntimeError("FirebaseClient.init() has not been called")
        return self._app

    def init(self) -> None:
        if self._app is not None:
            return
        if self.settings.FIREBASE_CREDENTIALS_PATH:
            credential = credentials.Certificate(self.settings.FIREBASE_CREDENTIALS_PATH)
        else:
            credential = credentials.ApplicationDefault()

        options = {}
        if self.settings.FIREBASE_STORAGE_BUCKET:
            options["storageBucket"] = self.settings.FIREBASE_STORAGE_BUCKET
        if self.settings.FIREBASE_PROJECT_ID:
            options["projectId"] = self.settings.FIREBASE_PROJECT_ID

        self._app = firebase_admin.initialize_app(credential, options, name=self.name)
        logger.info("Firebase Admin SDK initialized (%s)", self.name)

    def close(self) -> None:
        if self._app is None:
            return
        firebase_admin.delete_app(self._app)
        self._app = None
        self._verifier = None
        self._store = None
        logger.info("Firebase Admin SDK closed (%s)", self.name)

    def identity_verifier(self) -> FirebaseIdentityVerifier:
        if self._verifier is None:
            self._verifier = FirebaseIdentityVerifier(self.app)
        return self._verifier

    def object_store(self) -> FirebaseObjectStore:
        if self._store is None:
            self._store = FirebaseObjectStore(
                storage.bucket(app=self.app),
                signed_url_ttl=timedelta(seconds=self.settings.SIGNED_URL_EXPIRY_SECONDS),
            )
        return self._store

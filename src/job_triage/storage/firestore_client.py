"""Shared Firestore client factory."""

import logging
import os
from pathlib import Path
from typing import Dict, Optional

import firebase_admin
from firebase_admin import credentials
from google.cloud import firestore as gcloud_firestore

logger = logging.getLogger(__name__)


class FirestoreClient:
    """
    Creates and caches Firestore clients per database name.

    Every storage class asks this factory for its client so a process opens at
    most one connection per database.
    """

    _clients: Dict[str, gcloud_firestore.Client] = {}

    @classmethod
    def get_client(
        cls, database_name: str = "job-triage", credentials_path: Optional[str] = None
    ) -> gcloud_firestore.Client:
        """
        Get (or create) a Firestore client.

        Args:
            database_name: Firestore database name ("(default)" for the default database)
            credentials_path: Path to service account JSON.
                            Defaults to GOOGLE_APPLICATION_CREDENTIALS env var.

        Returns:
            Firestore client

        Raises:
            ValueError: If no credentials path is available
            FileNotFoundError: If the credentials file does not exist
            RuntimeError: If the client cannot be created
        """
        if database_name in cls._clients:
            return cls._clients[database_name]

        creds_path = credentials_path or os.getenv("GOOGLE_APPLICATION_CREDENTIALS")
        if not creds_path:
            raise ValueError(
                "Firebase credentials not found. Set GOOGLE_APPLICATION_CREDENTIALS "
                "environment variable or pass credentials_path parameter."
            )
        if not Path(creds_path).exists():
            raise FileNotFoundError(f"Credentials file not found: {creds_path}")

        try:
            cred = credentials.Certificate(creds_path)
            try:
                firebase_admin.get_app()
            except ValueError:
                firebase_admin.initialize_app(cred)
                logger.info("Initialized new Firebase app")

            project_id = cred.project_id
            if database_name == "(default)":
                client = gcloud_firestore.Client(project=project_id)
            else:
                client = gcloud_firestore.Client(project=project_id, database=database_name)

        except Exception as e:
            raise RuntimeError(f"Failed to initialize Firestore: {str(e)}") from e

        logger.info(f"Connected to Firestore database: {database_name} in project {project_id}")
        cls._clients[database_name] = client
        return client

    @classmethod
    def reset(cls) -> None:
        """Drop cached clients (used by tests)."""
        cls._clients.clear()

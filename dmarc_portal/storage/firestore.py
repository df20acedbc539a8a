import logging

import firebase_admin
from firebase_admin import credentials, firestore
from google.api_core import exceptions as gcp_exceptions

from dmarc_portal.errors import DomainNotFoundError, StorageError
from dmarc_portal.models.validation import ValidationResult
from dmarc_portal.storage.base import DomainRepository, result_fields

logger = logging.getLogger(__name__)


def init_firestore(service_account_path: str = "", project_id: str = ""):
    """Initialize the default Firebase app once and return a Firestore client."""
    try:
        firebase_admin.get_app()
    except ValueError:
        options = {"projectId": project_id} if project_id else None
        if service_account_path:
            cred = credentials.Certificate(service_account_path)
            logger.info("Initializing Firebase with service account %s", service_account_path)
        else:
            cred = credentials.ApplicationDefault()
            logger.info("Initializing Firebase with application default credentials")
        firebase_admin.initialize_app(cred, options)
    return firestore.client()


@firestore.transactional
def _increment_in_transaction(transaction, doc_ref) -> int:
    snapshot = doc_ref.get(transaction=transaction)
    if not snapshot.exists:
        raise DomainNotFoundError(f"Domain {doc_ref.id} not found")
    upvotes = (snapshot.to_dict() or {}).get("upvotes", 0) + 1
    transaction.update(doc_ref, {"upvotes": upvotes, "updatedAt": firestore.SERVER_TIMESTAMP})
    return upvotes


class FirestoreDomainRepository(DomainRepository):
    name = "firestore"

    def __init__(self, client, collection: str = "domains"):
        self._client = client
        self._collection = client.collection(collection)

    def get_domain(self, domain: str) -> dict | None:
        try:
            snapshot = self._collection.document(domain).get()
        except gcp_exceptions.GoogleAPIError as e:
            raise StorageError(f"Failed to get domain document for {domain}") from e
        return snapshot.to_dict() if snapshot.exists else None

    def create_domain(self, result: ValidationResult) -> None:
        doc = {
            "domain": result.domain,
            **result_fields(result),
            "upvotes": 0,
            "createdAt": firestore.SERVER_TIMESTAMP,
            "updatedAt": firestore.SERVER_TIMESTAMP,
        }
        try:
            self._collection.document(result.domain).set(doc)
        except gcp_exceptions.GoogleAPIError as e:
            raise StorageError(f"Failed to create domain document for {result.domain}") from e
        logger.info("Created domain document for %s", result.domain)

    def update_domain(self, result: ValidationResult) -> None:
        data = {**result_fields(result), "updatedAt": firestore.SERVER_TIMESTAMP}
        try:
            self._collection.document(result.domain).update(data)
        except gcp_exceptions.NotFound as e:
            raise DomainNotFoundError(f"Domain {result.domain} not found") from e
        except gcp_exceptions.GoogleAPIError as e:
            raise StorageError(f"Failed to update domain document for {result.domain}") from e
        logger.info("Updated domain document for %s", result.domain)

    def delete_domain(self, domain: str) -> None:
        try:
            self._collection.document(domain).delete()
        except gcp_exceptions.GoogleAPIError as e:
            raise StorageError(f"Failed to delete domain document for {domain}") from e
        logger.info("Deleted domain document for %s", domain)

    def get_non_compliant_domains(self) -> list[dict]:
        query = self._collection.where(filter=firestore.FieldFilter("isValid", "==", False))
        try:
            return [snapshot.to_dict() for snapshot in query.stream()]
        except gcp_exceptions.GoogleAPIError as e:
            raise StorageError("Failed to list non-compliant domains") from e

    def increment_upvotes(self, domain: str) -> int:
        doc_ref = self._collection.document(domain)
        try:
            upvotes = _increment_in_transaction(self._client.transaction(), doc_ref)
        except gcp_exceptions.GoogleAPIError as e:
            raise StorageError(f"Failed to increment upvotes for {domain}") from e
        logger.info("Incremented upvotes for %s to %d", domain, upvotes)
        return upvotes

from dmarc_portal.storage.base import DomainRepository
from dmarc_portal.storage.memory import InMemoryDomainRepository


def create_repository(config) -> DomainRepository:
    backend = config.get("STORAGE_BACKEND", "memory")
    if backend == "memory":
        return InMemoryDomainRepository()
    if backend == "firestore":
        from dmarc_portal.storage.firestore import FirestoreDomainRepository, init_firestore
        client = init_firestore(
            config.get("FIREBASE_SERVICE_ACCOUNT_PATH", ""),
            config.get("FIREBASE_PROJECT_ID", ""),
        )
        return FirestoreDomainRepository(client, config.get("FIRESTORE_COLLECTION", "domains"))
    raise ValueError(f"Unknown storage backend: {backend}")


__all__ = ["DomainRepository", "InMemoryDomainRepository", "create_repository"]

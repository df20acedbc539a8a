import copy
import logging
import threading
from datetime import datetime, timezone

from dmarc_portal.errors import DomainNotFoundError
from dmarc_portal.models.validation import ValidationResult
from dmarc_portal.storage.base import DomainRepository, result_fields

logger = logging.getLogger(__name__)


class InMemoryDomainRepository(DomainRepository):
    name = "memory"

    def __init__(self):
        self._docs: dict[str, dict] = {}
        self._lock = threading.Lock()

    def get_domain(self, domain: str) -> dict | None:
        with self._lock:
            doc = self._docs.get(domain)
            return copy.deepcopy(doc) if doc else None

    def create_domain(self, result: ValidationResult) -> None:
        now = datetime.now(timezone.utc)
        doc = {"domain": result.domain, **result_fields(result),
               "upvotes": 0, "createdAt": now, "updatedAt": now}
        with self._lock:
            self._docs[result.domain] = doc
        logger.info("Created domain document for %s", result.domain)

    def update_domain(self, result: ValidationResult) -> None:
        with self._lock:
            doc = self._docs.get(result.domain)
            if doc is None:
                raise DomainNotFoundError(f"Domain {result.domain} not found")
            doc.update(result_fields(result))
            doc["updatedAt"] = datetime.now(timezone.utc)
        logger.info("Updated domain document for %s", result.domain)

    def delete_domain(self, domain: str) -> None:
        with self._lock:
            self._docs.pop(domain, None)
        logger.info("Deleted domain document for %s", domain)

    def get_non_compliant_domains(self) -> list[dict]:
        with self._lock:
            return [copy.deepcopy(d) for d in self._docs.values() if not d["isValid"]]

    def increment_upvotes(self, domain: str) -> int:
        with self._lock:
            doc = self._docs.get(domain)
            if doc is None:
                raise DomainNotFoundError(f"Domain {domain} not found")
            doc["upvotes"] = doc.get("upvotes", 0) + 1
            doc["updatedAt"] = datetime.now(timezone.utc)
            count = doc["upvotes"]
        logger.info("Incremented upvotes for %s to %d", domain, count)
        return count

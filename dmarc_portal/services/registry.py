import logging

from dmarc_portal.models.validation import (
    DmarcStatus,
    DomainEntry,
    Severity,
    ValidationResult,
)
from dmarc_portal.storage.base import DomainRepository
from dmarc_portal.utils.ttl_cache import TtlCache

logger = logging.getLogger(__name__)


def dmarc_status(result: ValidationResult) -> DmarcStatus:
    if result.dmarc_record is None:
        return DmarcStatus.MISSING
    if any(i.severity is Severity.ERROR for i in result.issues):
        return DmarcStatus.INVALID
    return DmarcStatus.WEAK


class RegistrySortPolicy:
    """Most upvoted first, then most recently checked; otherwise stable."""

    @staticmethod
    def sort(entries: list[DomainEntry]) -> list[DomainEntry]:
        # Two stable passes: secondary key first, then primary.
        by_recency = sorted(entries, key=lambda e: e.last_checked, reverse=True)
        return sorted(by_recency, key=lambda e: e.upvotes, reverse=True)


def entry_from_document(doc: dict) -> DomainEntry:
    result = ValidationResult.from_document(doc)
    return DomainEntry(
        domain=result.domain,
        last_checked=result.check_timestamp,
        upvotes=int(doc.get("upvotes", 0) or 0),
        dmarc_status=dmarc_status(result),
        validation_result=result,
    )


class DomainRegistry:
    """Cache-first access to stored domain results."""

    def __init__(self, repository: DomainRepository, cache: TtlCache,
                 ttl_minutes: float | None = None):
        self.repository = repository
        self.cache = cache
        self.ttl_minutes = ttl_minutes

    @staticmethod
    def cache_key(domain: str) -> str:
        return f"domain:{domain}"

    def record_result(self, result: ValidationResult) -> None:
        """Keep the registry in step with a fresh validation.

        Non-compliant results are stored and cached; compliant ones are
        removed, since the registry only lists non-compliant domains.
        """
        if result.is_valid:
            if self.repository.get_domain(result.domain) is not None:
                self.remove(result.domain)
            else:
                self.cache.delete(self.cache_key(result.domain))
            return
        self.store_result(result)

    def store_result(self, result: ValidationResult) -> None:
        if self.repository.get_domain(result.domain) is not None:
            self.repository.update_domain(result)
        else:
            self.repository.create_domain(result)
        self.cache.set(self.cache_key(result.domain), result, self.ttl_minutes)
        logger.info("Stored validation result for %s", result.domain)

    def cache_result(self, result: ValidationResult) -> None:
        self.cache.set(self.cache_key(result.domain), result, self.ttl_minutes)

    def get_result(self, domain: str) -> ValidationResult | None:
        key = self.cache_key(domain)
        found, result = self.cache.get_with_info(key)
        if found:
            logger.debug("Cache hit for domain %s", domain)
            return result

        doc = self.repository.get_domain(domain)
        if doc is None:
            return None
        result = ValidationResult.from_document(doc)
        self.cache.set(key, result, self.ttl_minutes)
        return result

    def list_entries(self) -> list[DomainEntry]:
        docs = self.repository.get_non_compliant_domains()
        return RegistrySortPolicy.sort([entry_from_document(d) for d in docs])

    def remove(self, domain: str) -> None:
        self.repository.delete_domain(domain)
        self.cache.delete(self.cache_key(domain))
        logger.info("Removed domain from registry: %s", domain)

    def increment_upvotes(self, domain: str) -> int:
        count = self.repository.increment_upvotes(domain)
        self.cache.delete(self.cache_key(domain))
        return count

    def get_upvote_count(self, domain: str) -> int:
        doc = self.repository.get_domain(domain)
        return int(doc.get("upvotes", 0) or 0) if doc else 0

    def cache_stats(self) -> dict:
        return self.cache.stats()

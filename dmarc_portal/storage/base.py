from abc import ABC, abstractmethod

from dmarc_portal.models.validation import ValidationResult


class DomainRepository(ABC):
    """Durable store of domain documents keyed by domain name.

    Documents are plain dicts with the keys ``domain``, ``dmarcRecord``,
    ``isValid``, ``issues``, ``lastChecked``, ``upvotes``, ``createdAt``
    and ``updatedAt``.
    """

    name: str = "base"

    @abstractmethod
    def get_domain(self, domain: str) -> dict | None:
        """Return the stored document or None."""

    @abstractmethod
    def create_domain(self, result: ValidationResult) -> None:
        """Create a document with zero upvotes."""

    @abstractmethod
    def update_domain(self, result: ValidationResult) -> None:
        """Overwrite the validation fields, keeping upvotes."""

    @abstractmethod
    def delete_domain(self, domain: str) -> None:
        """Delete the document if present."""

    @abstractmethod
    def get_non_compliant_domains(self) -> list[dict]:
        """Return every document with isValid == False."""

    @abstractmethod
    def increment_upvotes(self, domain: str) -> int:
        """Atomically add one upvote and return the new count."""


def result_fields(result: ValidationResult) -> dict:
    return {
        "dmarcRecord": result.dmarc_record,
        "isValid": result.is_valid,
        "issues": [issue.to_dict() for issue in result.issues],
        "lastChecked": result.check_timestamp,
    }

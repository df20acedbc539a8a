from dmarc_portal.services.registry import (
    DomainRegistry,
    RegistrySortPolicy,
    dmarc_status,
)
from dmarc_portal.services.validation_service import DomainValidationService

__all__ = ["DomainRegistry", "DomainValidationService", "RegistrySortPolicy", "dmarc_status"]

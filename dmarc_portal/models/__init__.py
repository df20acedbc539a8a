from dmarc_portal.models.validation import (
    AlignmentMode,
    DmarcPolicy,
    DmarcStatus,
    DomainEntry,
    IssueType,
    PolicyAction,
    Severity,
    ValidationIssue,
    ValidationResult,
)

__all__ = [
    "AlignmentMode",
    "DmarcPolicy",
    "DmarcStatus",
    "DomainEntry",
    "IssueType",
    "PolicyAction",
    "Severity",
    "ValidationIssue",
    "ValidationResult",
]

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class IssueType(Enum):
    MISSING_RECORD = "missing_record"
    SYNTAX_ERROR = "syntax_error"
    WEAK_POLICY = "weak_policy"
    ALIGNMENT_ISSUE = "alignment_issue"
    CONFIGURATION_ISSUE = "configuration_issue"


class Severity(Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class PolicyAction(Enum):
    NONE = "none"
    QUARANTINE = "quarantine"
    REJECT = "reject"


class AlignmentMode(Enum):
    RELAXED = "relaxed"
    STRICT = "strict"


class DmarcStatus(Enum):
    MISSING = "missing"
    INVALID = "invalid"
    WEAK = "weak"


def _isoformat(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


def _to_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


@dataclass(frozen=True)
class ValidationIssue:
    type: IssueType
    severity: Severity
    message: str
    recommendation: str

    def __post_init__(self):
        if not self.message or not self.recommendation:
            raise ValueError("message and recommendation must be non-empty")

    def to_dict(self) -> dict:
        return {
            "type": self.type.value,
            "severity": self.severity.value,
            "message": self.message,
            "recommendation": self.recommendation,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ValidationIssue":
        return cls(
            type=IssueType(data["type"]),
            severity=Severity(data["severity"]),
            message=data["message"],
            recommendation=data["recommendation"],
        )


@dataclass(frozen=True)
class Alignment:
    spf: AlignmentMode = AlignmentMode.RELAXED
    dkim: AlignmentMode = AlignmentMode.RELAXED

    def to_dict(self) -> dict:
        return {"spf": self.spf.value, "dkim": self.dkim.value}


@dataclass(frozen=True)
class DmarcPolicy:
    """Structured form of a ``v=DMARC1`` TXT record."""

    raw_record: str
    policy: PolicyAction = PolicyAction.NONE
    version: str = "DMARC1"
    subdomain_policy: PolicyAction | None = None
    percentage: int | None = None
    reporting_addresses: tuple[str, ...] | None = None
    alignment: Alignment | None = None

    def to_dict(self) -> dict:
        data: dict[str, Any] = {
            "version": self.version,
            "policy": self.policy.value,
            "rawRecord": self.raw_record,
        }
        if self.subdomain_policy is not None:
            data["subdomainPolicy"] = self.subdomain_policy.value
        if self.percentage is not None:
            data["percentage"] = self.percentage
        if self.reporting_addresses is not None:
            data["reportingAddresses"] = list(self.reporting_addresses)
        if self.alignment is not None:
            data["alignment"] = self.alignment.to_dict()
        return data


@dataclass(frozen=True)
class ValidationResult:
    domain: str
    dmarc_record: str | None
    is_valid: bool
    issues: tuple[ValidationIssue, ...]
    check_timestamp: datetime
    parsed_policy: DmarcPolicy | None = None

    def has_errors(self) -> bool:
        return any(issue.severity is Severity.ERROR for issue in self.issues)

    def to_dict(self) -> dict:
        data = {
            "domain": self.domain,
            "dmarcRecord": self.dmarc_record,
            "isValid": self.is_valid,
            "issues": [issue.to_dict() for issue in self.issues],
            "checkTimestamp": _isoformat(self.check_timestamp),
        }
        if self.parsed_policy is not None:
            data["parsedPolicy"] = self.parsed_policy.to_dict()
        return data

    @classmethod
    def from_document(cls, doc: dict) -> "ValidationResult":
        """Build a result from a stored domain document."""
        return cls(
            domain=doc["domain"],
            dmarc_record=doc.get("dmarcRecord"),
            is_valid=bool(doc.get("isValid", False)),
            issues=tuple(ValidationIssue.from_dict(i) for i in doc.get("issues", [])),
            check_timestamp=_to_datetime(doc["lastChecked"]),
        )


@dataclass(frozen=True)
class DomainEntry:
    """Registry view of a non-compliant domain."""

    domain: str
    last_checked: datetime
    upvotes: int
    dmarc_status: DmarcStatus
    validation_result: ValidationResult = field(compare=False)

    def to_dict(self) -> dict:
        return {
            "domain": self.domain,
            "lastChecked": _isoformat(self.last_checked),
            "upvotes": self.upvotes,
            "dmarcStatus": self.dmarc_status.value,
            "validationResult": self.validation_result.to_dict(),
        }

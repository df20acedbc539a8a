import logging
from datetime import datetime, timezone
from typing import Callable

from dmarc_portal.analyzers.policy_evaluator import PolicyEvaluator, issue
from dmarc_portal.errors import DmarcParseError, DomainFormatError
from dmarc_portal.models.validation import (
    IssueType,
    Severity,
    ValidationIssue,
    ValidationResult,
)
from dmarc_portal.parsers.dmarc_parser import DmarcRecordParser
from dmarc_portal.utils.dns_utils import normalize_domain

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DomainValidationService:
    """DNS lookup, then parse, then evaluate, for one domain.

    ``dns_client`` must provide ``validate_domain_format(domain)`` and
    ``lookup_dmarc_record(domain)``.
    """

    def __init__(self, dns_client, evaluator: PolicyEvaluator | None = None,
                 now: Callable[[], datetime] = _utcnow):
        self._dns = dns_client
        self._evaluator = evaluator or PolicyEvaluator()
        self._now = now

    def validate_domain(self, domain: str) -> ValidationResult:
        """Validate a domain's DMARC configuration.

        Business outcomes (missing record, weak policy, bad record) are
        reported as issues. Raises DomainFormatError for a malformed domain
        and DnsLookupError for transport failures.
        """
        if not self._dns.validate_domain_format(domain):
            raise DomainFormatError("invalid domain format")

        clean = normalize_domain(domain)
        record = self._dns.lookup_dmarc_record(clean)
        checked_at = self._now()

        if record is None:
            logger.info("No DMARC record for %s", clean)
            return ValidationResult(
                domain=clean,
                dmarc_record=None,
                is_valid=False,
                issues=(issue("missing_record", IssueType.MISSING_RECORD, Severity.ERROR,
                              domain=clean),),
                check_timestamp=checked_at,
            )

        try:
            policy = DmarcRecordParser.parse(record)
        except DmarcParseError as e:
            logger.info("Unparseable DMARC record for %s: %s", clean, e)
            return ValidationResult(
                domain=clean,
                dmarc_record=record,
                is_valid=False,
                issues=(ValidationIssue(
                    type=IssueType.SYNTAX_ERROR,
                    severity=Severity.ERROR,
                    message=str(e),
                    recommendation="Fix the DMARC record so every tag carries a valid value",
                ),),
                check_timestamp=checked_at,
            )

        issues = tuple(self._evaluator.evaluate(policy))
        is_valid = not any(i.severity is Severity.ERROR for i in issues)
        logger.info("Validated %s: valid=%s, %d issues", clean, is_valid, len(issues))
        return ValidationResult(
            domain=clean,
            dmarc_record=record,
            is_valid=is_valid,
            issues=issues,
            check_timestamp=checked_at,
            parsed_policy=policy,
        )

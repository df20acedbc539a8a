import re

from dmarc_portal.models.validation import (
    AlignmentMode,
    DmarcPolicy,
    IssueType,
    PolicyAction,
    Severity,
    ValidationIssue,
)

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

ISSUE_TEXTS = {
    "policy_none": (
        'DMARC policy is set to "none" which provides no protection',
        'Consider upgrading to "quarantine" or "reject" policy for better email security',
    ),
    "partial_coverage": (
        "DMARC policy applies to only {pct}% of messages",
        "Consider setting pct=100 for full protection once you are confident in your configuration",
    ),
    "no_reporting": (
        "No reporting addresses configured (rua/ruf)",
        "Add reporting addresses to receive DMARC reports and monitor email authentication",
    ),
    "no_subdomain_policy": (
        "No explicit subdomain policy set",
        'Consider setting "sp" tag to explicitly control subdomain behavior',
    ),
    "weak_subdomain_policy": (
        "Subdomain policy is weaker than main domain policy",
        "Consider aligning subdomain policy with main domain policy for consistent protection",
    ),
    "relaxed_alignment": (
        "Both SPF and DKIM alignment are set to relaxed",
        "Consider strict alignment for stronger authentication requirements",
    ),
    "bad_reporting_address": (
        "Invalid reporting address format: {address}",
        "Ensure reporting addresses follow the format: mailto:user@domain.com",
    ),
    "missing_record": (
        "No DMARC record found for {domain}",
        "Publish a TXT record at _dmarc.{domain} starting with v=DMARC1",
    ),
}


def issue(key: str, issue_type: IssueType, severity: Severity, **params) -> ValidationIssue:
    message, recommendation = ISSUE_TEXTS[key]
    return ValidationIssue(
        type=issue_type,
        severity=severity,
        message=message.format(**params),
        recommendation=recommendation.format(**params),
    )


def is_valid_reporting_address(address: str) -> bool:
    if address.startswith("mailto:"):
        address = address[len("mailto:"):]
    return bool(_EMAIL_RE.match(address))


class PolicyEvaluator:
    """Turns a parsed DMARC policy into an ordered list of issues.

    Checks always run in the same order and never short-circuit.
    """

    def evaluate(self, policy: DmarcPolicy) -> list[ValidationIssue]:
        issues: list[ValidationIssue] = []
        issues.extend(self._check_policy(policy))
        issues.extend(self._check_percentage(policy))
        issues.extend(self._check_reporting(policy))
        issues.extend(self._check_subdomain_policy(policy))
        issues.extend(self._check_alignment(policy))
        issues.extend(self._check_reporting_addresses(policy))
        return issues

    def _check_policy(self, policy: DmarcPolicy) -> list[ValidationIssue]:
        if policy.policy is PolicyAction.NONE:
            return [issue("policy_none", IssueType.WEAK_POLICY, Severity.WARNING)]
        return []

    def _check_percentage(self, policy: DmarcPolicy) -> list[ValidationIssue]:
        if policy.percentage is not None and policy.percentage < 100:
            return [issue(
                "partial_coverage", IssueType.CONFIGURATION_ISSUE, Severity.INFO,
                pct=policy.percentage,
            )]
        return []

    def _check_reporting(self, policy: DmarcPolicy) -> list[ValidationIssue]:
        if not policy.reporting_addresses:
            return [issue("no_reporting", IssueType.CONFIGURATION_ISSUE, Severity.INFO)]
        return []

    def _check_subdomain_policy(self, policy: DmarcPolicy) -> list[ValidationIssue]:
        if policy.subdomain_policy is None:
            return [issue("no_subdomain_policy", IssueType.CONFIGURATION_ISSUE, Severity.INFO)]
        if policy.subdomain_policy is PolicyAction.NONE and policy.policy is not PolicyAction.NONE:
            return [issue("weak_subdomain_policy", IssueType.WEAK_POLICY, Severity.WARNING)]
        return []

    def _check_alignment(self, policy: DmarcPolicy) -> list[ValidationIssue]:
        alignment = policy.alignment
        if alignment is None:
            return []
        if alignment.spf is AlignmentMode.RELAXED and alignment.dkim is AlignmentMode.RELAXED:
            return [issue("relaxed_alignment", IssueType.ALIGNMENT_ISSUE, Severity.INFO)]
        return []

    def _check_reporting_addresses(self, policy: DmarcPolicy) -> list[ValidationIssue]:
        return [
            issue("bad_reporting_address", IssueType.SYNTAX_ERROR, Severity.ERROR, address=address)
            for address in policy.reporting_addresses or ()
            if not is_valid_reporting_address(address)
        ]

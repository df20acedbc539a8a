import pytest

from dmarc_portal.analyzers import PolicyEvaluator
from dmarc_portal.analyzers.policy_evaluator import is_valid_reporting_address
from dmarc_portal.models.validation import IssueType, Severity
from dmarc_portal.parsers import DmarcRecordParser


def _evaluate(record: str):
    return PolicyEvaluator().evaluate(DmarcRecordParser.parse(record))


def _kinds(issues):
    return [(i.type, i.severity) for i in issues]


class TestPolicyEvaluator:
    def test_minimal_none_policy(self):
        issues = _evaluate("v=DMARC1; p=none")
        assert _kinds(issues) == [
            (IssueType.WEAK_POLICY, Severity.WARNING),
            (IssueType.CONFIGURATION_ISSUE, Severity.INFO),
            (IssueType.CONFIGURATION_ISSUE, Severity.INFO),
        ]
        assert "no protection" in issues[0].message
        assert "reporting" in issues[1].message.lower()
        assert "subdomain" in issues[2].message.lower()

    def test_partial_coverage_reject(self):
        issues = _evaluate(
            "v=DMARC1; p=reject; pct=50; rua=mailto:dmarc@example.com; adkim=s; aspf=r"
        )
        assert _kinds(issues) == [
            (IssueType.CONFIGURATION_ISSUE, Severity.INFO),
            (IssueType.CONFIGURATION_ISSUE, Severity.INFO),
        ]
        assert "50%" in issues[0].message
        assert "subdomain" in issues[1].message.lower()

    def test_strong_record_has_no_issues(self):
        issues = _evaluate(
            "v=DMARC1; p=reject; sp=reject; rua=mailto:d@example.com; adkim=s; aspf=s"
        )
        assert issues == []

    def test_pct_100_is_not_partial(self):
        issues = _evaluate("v=DMARC1; p=reject; sp=reject; pct=100; rua=mailto:d@example.com")
        assert issues == []

    def test_weak_subdomain_policy(self):
        issues = _evaluate("v=DMARC1; p=quarantine; sp=none; rua=mailto:d@example.com")
        assert _kinds(issues) == [(IssueType.WEAK_POLICY, Severity.WARNING)]
        assert "Subdomain" in issues[0].message

    def test_sp_none_with_p_none_reports_only_main_policy(self):
        issues = _evaluate("v=DMARC1; p=none; sp=none; rua=mailto:d@example.com")
        assert _kinds(issues) == [(IssueType.WEAK_POLICY, Severity.WARNING)]

    def test_relaxed_alignment(self):
        issues = _evaluate("v=DMARC1; p=reject; sp=reject; rua=mailto:d@example.com; adkim=r")
        assert _kinds(issues) == [(IssueType.ALIGNMENT_ISSUE, Severity.INFO)]

    def test_invalid_reporting_addresses_in_order(self):
        issues = _evaluate(
            "v=DMARC1; p=reject; sp=reject; rua=mailto:bad, mailto:ok@x.com; ruf=also-bad"
        )
        errors = [i for i in issues if i.severity is Severity.ERROR]
        assert [i.type for i in errors] == [IssueType.SYNTAX_ERROR, IssueType.SYNTAX_ERROR]
        assert "mailto:bad" in errors[0].message
        assert "also-bad" in errors[1].message

    def test_everything_accumulates(self):
        issues = _evaluate("v=DMARC1; p=none; pct=10; aspf=r; rua=nope")
        assert [i.type for i in issues] == [
            IssueType.WEAK_POLICY,
            IssueType.CONFIGURATION_ISSUE,
            IssueType.CONFIGURATION_ISSUE,
            IssueType.ALIGNMENT_ISSUE,
            IssueType.SYNTAX_ERROR,
        ]

    @pytest.mark.parametrize("record", [
        "v=DMARC1; p=none",
        "v=DMARC1; p=none; sp=reject",
        "v=DMARC1; p=none; sp=none; pct=5; rua=mailto:a@b.co",
        "v=DMARC1; p=none; adkim=s; aspf=s; ruf=x@y.z",
    ])
    def test_none_policy_yields_one_weak_policy_issue(self, record):
        issues = _evaluate(record)
        weak = [i for i in issues if i.type is IssueType.WEAK_POLICY]
        assert len(weak) == 1
        assert "no protection" in weak[0].message

    @pytest.mark.parametrize("pct", [0, 1, 50, 99])
    def test_partial_percentage_mentions_coverage(self, pct):
        issues = _evaluate(f"v=DMARC1; p=reject; pct={pct}")
        coverage = [i for i in issues if f"{pct}% of messages" in i.message]
        assert len(coverage) == 1
        assert coverage[0].type is IssueType.CONFIGURATION_ISSUE

    def test_evaluation_is_deterministic(self):
        record = "v=DMARC1; p=quarantine; sp=none; pct=30; rua=mailto:a@b.com,bad; adkim=r; aspf=r"
        first = PolicyEvaluator().evaluate(DmarcRecordParser.parse(record))
        second = PolicyEvaluator().evaluate(DmarcRecordParser.parse(record))
        assert first == second


def test_reporting_address_format():
    assert is_valid_reporting_address("mailto:dmarc@example.com") is True
    assert is_valid_reporting_address("dmarc@example.com") is True
    assert is_valid_reporting_address("mailto:dmarc@example") is False
    assert is_valid_reporting_address("mailto:") is False
    assert is_valid_reporting_address("mailto:dm arc@example.com") is False

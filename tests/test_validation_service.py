from datetime import datetime, timezone

import pytest

from conftest import FakeDnsClient
from dmarc_portal.errors import DnsLookupError, DomainFormatError
from dmarc_portal.models.validation import IssueType, PolicyAction, Severity
from dmarc_portal.services import DomainValidationService

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def _service(records=None):
    dns_client = FakeDnsClient(records)
    return DomainValidationService(dns_client, now=lambda: NOW), dns_client


class TestDomainValidationService:
    def test_missing_record(self):
        service, _ = _service()
        result = service.validate_domain("example.com")
        assert result.dmarc_record is None
        assert result.is_valid is False
        assert [(i.type, i.severity) for i in result.issues] == [
            (IssueType.MISSING_RECORD, Severity.ERROR),
        ]
        assert result.parsed_policy is None
        assert result.check_timestamp == NOW

    def test_weak_record_is_still_valid(self):
        service, _ = _service({"example.com": "v=DMARC1; p=none"})
        result = service.validate_domain("example.com")
        assert result.is_valid is True
        assert len(result.issues) == 3
        assert result.parsed_policy.policy is PolicyAction.NONE
        assert result.dmarc_record == "v=DMARC1; p=none"

    def test_error_issue_makes_result_invalid(self):
        service, _ = _service({"example.com": "v=DMARC1; p=reject; sp=reject; rua=broken"})
        result = service.validate_domain("example.com")
        assert result.is_valid is False
        assert result.issues[-1].type is IssueType.SYNTAX_ERROR

    def test_unparseable_record_reported_as_syntax_error(self):
        service, _ = _service({"example.com": "v=DMARC1; p=sometimes"})
        result = service.validate_domain("example.com")
        assert result.is_valid is False
        assert result.dmarc_record == "v=DMARC1; p=sometimes"
        assert result.parsed_policy is None
        assert [(i.type, i.severity) for i in result.issues] == [
            (IssueType.SYNTAX_ERROR, Severity.ERROR),
        ]
        assert "sometimes" in result.issues[0].message

    def test_domain_is_normalized(self):
        service, dns_client = _service({"example.com": "v=DMARC1; p=reject"})
        result = service.validate_domain("  Example.COM ")
        assert result.domain == "example.com"
        assert dns_client.lookups == ["example.com"]

    @pytest.mark.parametrize("domain", ["", "nodot", "bad..example.com", "-x.com", "a" * 250 + ".com"])
    def test_bad_format_fails_before_lookup(self, domain):
        service, dns_client = _service()
        with pytest.raises(DomainFormatError):
            service.validate_domain(domain)
        assert dns_client.lookups == []

    def test_format_error_is_a_lookup_error(self):
        service, _ = _service()
        with pytest.raises(DnsLookupError, match="invalid domain format"):
            service.validate_domain("not a domain")

    def test_transport_failure_propagates(self):
        service, dns_client = _service()
        dns_client.error = DnsLookupError("timeout")
        with pytest.raises(DnsLookupError):
            service.validate_domain("example.com")

    def test_results_are_independent_snapshots(self):
        service, _ = _service({"example.com": "v=DMARC1; p=none"})
        first = service.validate_domain("example.com")
        second = service.validate_domain("example.com")
        assert first == second
        assert first is not second

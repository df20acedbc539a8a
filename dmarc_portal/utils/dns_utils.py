import logging
import re

import dns.exception
import dns.resolver

from dmarc_portal.errors import DnsLookupError, DomainFormatError
from dmarc_portal.parsers.dmarc_parser import DMARC_PREFIX

logger = logging.getLogger(__name__)

_DOMAIN_RE = re.compile(
    r"^(?:[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?\.)+[a-z]{2,}$"
)
MAX_DOMAIN_LENGTH = 253


def normalize_domain(domain: str) -> str:
    return domain.strip().lower() if isinstance(domain, str) else ""


def validate_domain_format(domain: str) -> bool:
    """Syntax-only domain check; never touches the network."""
    clean = normalize_domain(domain)
    if not clean or len(clean) > MAX_DOMAIN_LENGTH:
        return False
    return bool(_DOMAIN_RE.match(clean))


class DnsClient:
    """Resolves ``_dmarc.<domain>`` TXT records with dnspython."""

    def __init__(self, timeout: float = 5.0, lifetime: float = 10.0,
                 nameservers: list[str] | None = None, resolver=None):
        if resolver is None:
            resolver = dns.resolver.Resolver(configure=not nameservers)
            resolver.timeout = timeout
            resolver.lifetime = lifetime
            if nameservers:
                resolver.nameservers = nameservers
        self._resolver = resolver

    def validate_domain_format(self, domain: str) -> bool:
        return validate_domain_format(domain)

    def lookup_dmarc_record(self, domain: str) -> str | None:
        """Return the first TXT record starting with v=DMARC1, or None.

        Raises DomainFormatError before any query for a malformed domain
        and DnsLookupError for transport failures.
        """
        if not self.validate_domain_format(domain):
            raise DomainFormatError(f"Invalid domain format: {domain}")

        clean = normalize_domain(domain)
        qname = f"_dmarc.{clean}"
        logger.debug("Looking up DMARC record for %s", qname)
        try:
            answers = self._resolver.resolve(qname, "TXT")
        except (dns.resolver.NXDOMAIN, dns.resolver.NoAnswer):
            logger.debug("No DMARC record found for %s", clean)
            return None
        except dns.exception.Timeout as e:
            logger.error("DNS lookup timed out for %s: %s", clean, e)
            raise DnsLookupError(f"DNS lookup timed out for domain {clean}") from e
        except dns.exception.DNSException as e:
            logger.error("DNS lookup failed for %s: %s", clean, e)
            raise DnsLookupError(f"DNS lookup failed for domain {clean}: {e}") from e

        for rdata in answers:
            txt = b"".join(rdata.strings).decode("utf-8", errors="replace")
            if txt.startswith(DMARC_PREFIX):
                logger.debug("Found DMARC record for %s: %s", clean, txt)
                return txt

        logger.debug("No DMARC record among TXT answers for %s", clean)
        return None

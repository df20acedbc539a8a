import logging
from dataclasses import replace
from typing import Callable

from dmarc_portal.errors import DmarcParseError
from dmarc_portal.models.validation import (
    Alignment,
    AlignmentMode,
    DmarcPolicy,
    PolicyAction,
)

logger = logging.getLogger(__name__)

DMARC_PREFIX = "v=DMARC1"

_ALIGNMENT_VALUES = {
    "r": AlignmentMode.RELAXED,
    "relaxed": AlignmentMode.RELAXED,
    "s": AlignmentMode.STRICT,
    "strict": AlignmentMode.STRICT,
}


def _policy_action(value: str, label: str) -> PolicyAction:
    try:
        return PolicyAction(value)
    except ValueError:
        raise DmarcParseError(f"Invalid {label} value: {value}") from None


def _alignment_mode(value: str, label: str) -> AlignmentMode:
    mode = _ALIGNMENT_VALUES.get(value)
    if mode is None:
        raise DmarcParseError(f"Invalid {label} alignment value: {value}")
    return mode


def _handle_version(policy: DmarcPolicy, value: str) -> DmarcPolicy:
    if value != "DMARC1":
        raise DmarcParseError(f"Invalid DMARC version: {value}")
    return policy


def _handle_policy(policy: DmarcPolicy, value: str) -> DmarcPolicy:
    return replace(policy, policy=_policy_action(value, "policy"))


def _handle_subdomain_policy(policy: DmarcPolicy, value: str) -> DmarcPolicy:
    return replace(policy, subdomain_policy=_policy_action(value, "subdomain policy"))


def _handle_percentage(policy: DmarcPolicy, value: str) -> DmarcPolicy:
    if not value.isascii() or not value.isdigit() or int(value) > 100:
        raise DmarcParseError(f"Invalid percentage value: {value}")
    return replace(policy, percentage=int(value))


def _handle_reporting(policy: DmarcPolicy, value: str) -> DmarcPolicy:
    addresses = tuple(a.strip() for a in value.split(",") if a.strip())
    return replace(policy, reporting_addresses=(policy.reporting_addresses or ()) + addresses)


def _handle_dkim_alignment(policy: DmarcPolicy, value: str) -> DmarcPolicy:
    alignment = policy.alignment or Alignment()
    return replace(policy, alignment=replace(alignment, dkim=_alignment_mode(value, "DKIM")))


def _handle_spf_alignment(policy: DmarcPolicy, value: str) -> DmarcPolicy:
    alignment = policy.alignment or Alignment()
    return replace(policy, alignment=replace(alignment, spf=_alignment_mode(value, "SPF")))


# Tags outside this table (fo, rf, ri, ...) are ignored.
TAG_HANDLERS: dict[str, Callable[[DmarcPolicy, str], DmarcPolicy]] = {
    "v": _handle_version,
    "p": _handle_policy,
    "sp": _handle_subdomain_policy,
    "pct": _handle_percentage,
    "rua": _handle_reporting,
    "ruf": _handle_reporting,
    "adkim": _handle_dkim_alignment,
    "aspf": _handle_spf_alignment,
}


class DmarcRecordParser:
    @staticmethod
    def parse(record: str) -> DmarcPolicy:
        """Parse a raw DMARC TXT record.

        Raises DmarcParseError for records that do not start with
        ``v=DMARC1`` or carry an invalid value for a recognized tag.
        A record is either fully parsed or rejected.
        """
        if not record or not isinstance(record, str):
            raise DmarcParseError("Invalid DMARC record: record must be a non-empty string")

        clean = record.strip()
        if not clean.startswith(DMARC_PREFIX):
            raise DmarcParseError(f"Invalid DMARC record: must start with {DMARC_PREFIX}")

        policy = DmarcPolicy(raw_record=clean)
        for key, value in DmarcRecordParser._tags(clean):
            handler = TAG_HANDLERS.get(key.lower())
            if handler is None:
                logger.debug("Ignoring unknown DMARC tag: %s=%s", key, value)
                continue
            policy = handler(policy, value)
        return policy

    @staticmethod
    def _tags(record: str) -> list[tuple[str, str]]:
        tags = []
        for segment in record.split(";"):
            segment = segment.strip()
            if not segment or "=" not in segment:
                continue
            key, value = segment.split("=", 1)
            key = key.strip()
            if key:
                tags.append((key, value.strip()))
        return tags

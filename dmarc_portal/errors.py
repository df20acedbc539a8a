class DmarcPortalError(Exception):
    """Base class for all errors raised by the portal."""


class DnsLookupError(DmarcPortalError):
    """DNS transport failure (timeout, server error).

    A domain without a DMARC record is not an error; lookups return None.
    """


class DomainFormatError(DnsLookupError):
    """The domain failed syntax validation before any network call."""


class DmarcParseError(DmarcPortalError, ValueError):
    """The DMARC record text cannot be turned into a policy."""


class StorageError(DmarcPortalError):
    """The storage backend failed."""


class DomainNotFoundError(StorageError):
    """No stored document exists for the domain."""

from dmarc_portal.parsers.dmarc_parser import DmarcRecordParser

__all__ = ["DmarcRecordParser"]

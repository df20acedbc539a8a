import logging
import time
from dataclasses import dataclass

from flask import Flask
from flask_cors import CORS

from dmarc_portal.services import DomainRegistry, DomainValidationService
from dmarc_portal.storage import DomainRepository, create_repository
from dmarc_portal.utils.dns_utils import DnsClient
from dmarc_portal.utils.ttl_cache import TtlCache
from dmarc_portal.utils.vote_ledger import VoteLedger

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

logger = logging.getLogger(__name__)


@dataclass
class PortalServices:
    """Process-wide state, created empty when the app starts."""

    cache: TtlCache
    ledger: VoteLedger
    registry: DomainRegistry
    validator: DomainValidationService


def get_services(app: Flask) -> PortalServices:
    return app.extensions["dmarc_portal"]


def create_app(config_object=None, dns_client=None, repository: DomainRepository | None = None,
               clock=time.monotonic):
    app = Flask(__name__)
    app.config.from_object(config_object or "dmarc_portal.config.Config")
    logging.basicConfig(level=app.config.get("LOG_LEVEL", "INFO"), format=LOG_FORMAT)

    CORS(app, origins=app.config.get("CORS_ORIGINS", "*"))

    if dns_client is None:
        dns_client = DnsClient(
            timeout=app.config["DNS_TIMEOUT_SECONDS"],
            lifetime=app.config["DNS_LIFETIME_SECONDS"],
            nameservers=app.config.get("DNS_NAMESERVERS") or None,
        )
    if repository is None:
        repository = create_repository(app.config)

    cache = TtlCache(
        default_ttl_minutes=app.config["CACHE_TTL_MINUTES"],
        clock=clock,
        maxsize=app.config["CACHE_MAX_ENTRIES"],
    )
    app.extensions["dmarc_portal"] = PortalServices(
        cache=cache,
        ledger=VoteLedger(),
        registry=DomainRegistry(repository, cache, app.config["CACHE_TTL_MINUTES"]),
        validator=DomainValidationService(dns_client),
    )
    logger.info("DMARC portal started with %s storage", repository.name)

    cleanup_interval = app.config["CACHE_CLEANUP_INTERVAL_SECONDS"]
    last_cleanup = [clock()]

    @app.before_request
    def cleanup_cache():
        now = clock()
        if now - last_cleanup[0] >= cleanup_interval:
            last_cleanup[0] = now
            cache.cleanup()

    from dmarc_portal.api import api_bp
    app.register_blueprint(api_bp, url_prefix="/api")

    return app

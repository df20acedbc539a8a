import pytest

from dmarc_portal import create_app, get_services
from dmarc_portal.config import Config
from dmarc_portal.storage import InMemoryDomainRepository
from dmarc_portal.utils.dns_utils import validate_domain_format


class FakeDnsClient:
    def __init__(self, records=None):
        self.records = dict(records or {})
        self.lookups: list[str] = []
        self.error: Exception | None = None

    def validate_domain_format(self, domain):
        return validate_domain_format(domain)

    def lookup_dmarc_record(self, domain):
        self.lookups.append(domain)
        if self.error is not None:
            raise self.error
        return self.records.get(domain)


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class TestConfig(Config):
    TESTING = True
    STORAGE_BACKEND = "memory"
    CACHE_TTL_MINUTES = 60
    CACHE_CLEANUP_INTERVAL_SECONDS = 300


@pytest.fixture
def dns_client():
    return FakeDnsClient()


@pytest.fixture
def app(dns_client):
    return create_app(TestConfig, dns_client=dns_client, repository=InMemoryDomainRepository())


@pytest.fixture
def client(app):
    with app.test_client() as client:
        yield client


@pytest.fixture
def services(app):
    return get_services(app)

import logging

from flask import current_app, jsonify, request

from dmarc_portal import get_services
from dmarc_portal.api import api_bp
from dmarc_portal.errors import (
    DmarcPortalError,
    DnsLookupError,
    DomainFormatError,
    DomainNotFoundError,
    StorageError,
)
from dmarc_portal.utils.dns_utils import normalize_domain
from dmarc_portal.utils.http_utils import get_client_ip

logger = logging.getLogger(__name__)


def _error(message: str, status: int):
    return jsonify({"success": False, "error": message}), status


def _already_voted(registry, domain: str):
    return jsonify({
        "success": False,
        "newUpvoteCount": registry.get_upvote_count(domain),
        "message": "You have already voted for this domain",
    })


@api_bp.route("/health", methods=["GET"])
def health():
    services = get_services(current_app)
    stats = services.registry.cache_stats()
    return jsonify({
        "status": "ok",
        "storage": services.registry.repository.name,
        "cache": {"live": len(stats["keys"]), "expired": len(stats["expired_keys"])},
        "recorded_votes": services.ledger.size(),
    })


@api_bp.route("/domains/validate", methods=["POST"])
def validate_domain():
    data = request.get_json(silent=True) or {}
    domain = data.get("domain")
    if not isinstance(domain, str) or not domain.strip():
        return _error("Domain is required", 400)

    services = get_services(current_app)
    logger.info("Validating domain: %s", domain)
    try:
        result = services.validator.validate_domain(domain)
    except DomainFormatError:
        return _error("Invalid domain format", 400)
    except DnsLookupError:
        logger.exception("DNS lookup failed for %s", domain)
        return _error("DNS lookup failed, please try again later", 502)

    try:
        services.registry.record_result(result)
    except StorageError:
        logger.exception("Failed to store validation result for %s", result.domain)
        services.registry.cache_result(result)

    return jsonify(result.to_dict())


@api_bp.route("/domains/registry", methods=["GET"])
def domain_registry():
    services = get_services(current_app)
    try:
        entries = services.registry.list_entries()
    except StorageError:
        logger.exception("Failed to fetch domain registry")
        return _error("Failed to fetch domain registry", 500)
    return jsonify([entry.to_dict() for entry in entries])


@api_bp.route("/domains/<domain>/upvote", methods=["POST"])
def upvote_domain(domain):
    domain = normalize_domain(domain)
    client_ip = get_client_ip(request)
    services = get_services(current_app)
    registry = services.registry
    ledger = services.ledger
    logger.info("Upvote request for %s from %s", domain, client_ip)

    try:
        if ledger.has_voted(client_ip, domain):
            return _already_voted(registry, domain)

        if registry.get_result(domain) is None:
            return _error("Domain not found in registry", 404)

        if not ledger.try_record_vote(client_ip, domain):
            return _already_voted(registry, domain)
    except DomainNotFoundError:
        return _error("Domain not found in registry", 404)
    except StorageError:
        logger.exception("Failed to upvote %s", domain)
        return _error("Failed to record vote", 500)

    try:
        count = registry.increment_upvotes(domain)
    except DomainNotFoundError:
        ledger.discard_vote(client_ip, domain)
        return _error("Domain not found in registry", 404)
    except StorageError:
        ledger.discard_vote(client_ip, domain)
        logger.exception("Failed to upvote %s", domain)
        return _error("Failed to record vote", 500)

    logger.info("Upvoted %s, new count %d", domain, count)
    return jsonify({
        "success": True,
        "newUpvoteCount": count,
        "message": "Vote recorded successfully",
    })


@api_bp.route("/domains/<domain>/recheck", methods=["POST"])
def recheck_domain(domain):
    services = get_services(current_app)
    logger.info("Re-checking domain: %s", domain)
    try:
        result = services.validator.validate_domain(domain)
        services.registry.record_result(result)
    except DomainFormatError:
        return _error("Invalid domain format", 400)
    except DmarcPortalError:
        logger.exception("Failed to recheck %s", domain)
        return _error("Failed to recheck domain", 500)

    if result.is_valid:
        logger.info("Domain %s is now compliant, removed from registry", result.domain)
    return jsonify(result.to_dict())


@api_bp.route("/domains/<domain>/details", methods=["GET"])
def domain_details(domain):
    services = get_services(current_app)
    try:
        result = services.registry.get_result(normalize_domain(domain))
    except StorageError:
        logger.exception("Failed to get details for %s", domain)
        return _error("Failed to get domain details", 500)
    if result is None:
        return _error("Domain not found", 404)
    return jsonify(result.to_dict())

from flask import Request


def get_client_ip(request: Request) -> str:
    """Client IP from proxy headers, falling back to the socket address."""
    forwarded = request.headers.get("X-Forwarded-For", "")
    if forwarded.strip():
        return forwarded.split(",")[0].strip()

    for header in ("X-Real-IP", "X-Client-IP"):
        value = request.headers.get(header, "").strip()
        if value:
            return value

    return request.remote_addr or "unknown"

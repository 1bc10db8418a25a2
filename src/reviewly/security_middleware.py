"""
Security middleware: client address resolution and response headers.
"""

from __future__ import annotations

from flask import Flask, Request, request

IPV4_MAPPED_PREFIX = "::ffff:"
UNKNOWN_ADDRESS = "unknown"


def normalize_ip(ip: str) -> str:
    """
    Normalize an address for storage and comparison.

    IPv6-mapped IPv4 addresses (``::ffff:192.168.1.1``) become plain IPv4.
    """
    ip = (ip or "").strip()
    if ip.lower().startswith(IPV4_MAPPED_PREFIX):
        return ip[len(IPV4_MAPPED_PREFIX):]
    return ip


def get_client_ip(req: Request | None = None) -> str:
    """
    Get the real client IP considering proxies.

    Headers are checked in order of preference:
    1. X-Real-IP (single reverse proxy)
    2. X-Forwarded-For, first entry (original client before any proxy)
    3. CF-Connecting-IP (Cloudflare)
    4. The transport peer address

    Returns:
        Normalized client IP address string
    """
    req = req or request

    real_ip = req.headers.get("X-Real-IP", "").strip()
    if real_ip:
        return normalize_ip(real_ip)

    forwarded_for = req.headers.get("X-Forwarded-For", "")
    if forwarded_for:
        first_hop = forwarded_for.split(",")[0].strip()
        if first_hop:
            return normalize_ip(first_hop)

    cf_ip = req.headers.get("CF-Connecting-IP", "").strip()
    if cf_ip:
        return normalize_ip(cf_ip)

    return normalize_ip(req.remote_addr or UNKNOWN_ADDRESS)


def configure_security_headers(app: Flask) -> None:
    """
    Add baseline security headers to every response.

    Args:
        app: Flask application instance
    """

    @app.after_request
    def add_security_headers(response):
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "no-referrer"

        # API answers are per-caller; credentials and review data must not be cached
        if request.path.startswith("/api/"):
            response.headers["Cache-Control"] = "no-store"

        return response

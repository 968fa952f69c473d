"""WSGI middleware wrapped around the Flask app.

Each layer takes the downstream WSGI callable and is itself a WSGI callable,
the same way Werkzeug's ``ProxyFix`` is applied::

    app.wsgi_app = apply_middleware(app.wsgi_app)

The default chain runs CORS -> Logging -> SecurityHeaders -> Flask routing.
Headers added by a layer are defaults: if the view sets the same header it
is left alone.
"""

import logging
import time

from werkzeug.datastructures import Headers
from werkzeug.wrappers import Response
from werkzeug.wsgi import ClosingIterator

access_log = logging.getLogger("swarmhub.access")

CORS_HEADERS = (
    ("Access-Control-Allow-Origin", "*"),
    ("Access-Control-Allow-Methods", "GET, POST, PUT, DELETE, OPTIONS"),
    ("Access-Control-Allow-Headers", "Origin, Content-Type, Accept, Authorization, X-Requested-With"),
    ("Access-Control-Allow-Credentials", "true"),
    ("Access-Control-Max-Age", "86400"),
)

CONTENT_SECURITY_POLICY = (
    "default-src 'self'; "
    "style-src 'self' 'unsafe-inline' https://fonts.googleapis.com https://cdnjs.cloudflare.com https://cdn.jsdelivr.net; "
    "script-src 'self' 'unsafe-inline' 'unsafe-eval' https://cdnjs.cloudflare.com https://cdn.jsdelivr.net https://code.jquery.com https://ajax.googleapis.com; "
    "font-src 'self' https://fonts.gstatic.com https://cdnjs.cloudflare.com https://cdn.jsdelivr.net; "
    "img-src 'self' data: https: http:; "
    "connect-src 'self' https: wss: ws:; "
    "media-src 'self'; "
    "object-src 'none'; "
    "frame-ancestors 'self'"
)

SECURITY_HEADERS = (
    ("Strict-Transport-Security", "max-age=31536000; includeSubDomains"),
    ("X-Content-Type-Options", "nosniff"),
    ("X-Frame-Options", "SAMEORIGIN"),
    ("X-XSS-Protection", "1; mode=block"),
    ("Content-Security-Policy", CONTENT_SECURITY_POLICY),
    ("Referrer-Policy", "strict-origin-when-cross-origin"),
)


def request_uri(environ) -> str:
    """The request target as the client sent it (path plus query)."""
    uri = environ.get("REQUEST_URI") or environ.get("RAW_URI")
    if uri:
        return uri
    uri = environ.get("SCRIPT_NAME", "") + environ.get("PATH_INFO", "")
    query = environ.get("QUERY_STRING")
    return f"{uri}?{query}" if query else uri


def remote_addr(environ) -> str:
    addr = environ.get("REMOTE_ADDR", "-")
    port = environ.get("REMOTE_PORT")
    return f"{addr}:{port}" if port else addr


def log_request(environ, started: float) -> None:
    elapsed_ms = (time.perf_counter() - started) * 1000
    access_log.info(
        "%s %s %s %.3fms",
        environ.get("REQUEST_METHOD", "-"),
        request_uri(environ),
        remote_addr(environ),
        elapsed_ms,
    )


class HeaderDefaultsMiddleware:
    """Adds a fixed set of headers to every response the downstream app
    starts, unless the downstream app already set them."""

    headers = ()

    def __init__(self, app):
        self.app = app

    def add_defaults(self, headers: Headers) -> None:
        for name, value in self.headers:
            headers.setdefault(name, value)

    def __call__(self, environ, start_response):
        def _start_response(status, response_headers, exc_info=None):
            headers = Headers(response_headers)
            self.add_defaults(headers)
            return start_response(status, headers.to_wsgi_list(), exc_info)

        return self.app(environ, _start_response)


class CORSMiddleware(HeaderDefaultsMiddleware):
    """Permissive CORS headers; answers preflight requests itself."""

    headers = CORS_HEADERS

    def __call__(self, environ, start_response):
        if environ.get("REQUEST_METHOD") == "OPTIONS":
            started = time.perf_counter()
            response = Response(status=200, headers=list(self.headers))
            return ClosingIterator(
                response(environ, start_response),
                lambda: log_request(environ, started),
            )
        return super().__call__(environ, start_response)


class LoggingMiddleware:
    """One access-log line per request, written once the body is sent."""

    def __init__(self, app):
        self.app = app

    def __call__(self, environ, start_response):
        started = time.perf_counter()
        try:
            app_iter = self.app(environ, start_response)
        except Exception:
            log_request(environ, started)
            raise
        return ClosingIterator(app_iter, lambda: log_request(environ, started))


class SecurityHeadersMiddleware(HeaderDefaultsMiddleware):
    headers = SECURITY_HEADERS


DEFAULT_CHAIN = (CORSMiddleware, LoggingMiddleware, SecurityHeadersMiddleware)


def apply_middleware(wsgi_app, chain=DEFAULT_CHAIN):
    """Wrap ``wsgi_app`` so that ``chain[0]`` is the outermost layer."""
    for middleware in reversed(chain):
        wsgi_app = middleware(wsgi_app)
    return wsgi_app

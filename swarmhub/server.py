"""Process entry point: picks plain HTTP or HTTPS and serves the app.

Usage::

    swarmhub                      # HTTP on $HTTP_PORT (default 8080)
    CERT_FILE=cert.pem KEY_FILE=key.pem swarmhub   # HTTPS on $HTTPS_PORT

Listener bind failures and certificate loading errors are fatal: they are
logged and the process exits with status 1.
"""

import logging
import ssl
import sys

from werkzeug.serving import WSGIRequestHandler, make_server

from . import create_app
from .config import Config

logger = logging.getLogger(__name__)

READ_TIMEOUT = 15
WRITE_TIMEOUT = 15
IDLE_TIMEOUT = 60

# OpenSSL names; these only govern TLS 1.2, TLS 1.3 suites are fixed by OpenSSL
CIPHER_SUITES = (
    "ECDHE-RSA-AES256-GCM-SHA384",
    "ECDHE-RSA-CHACHA20-POLY1305",
    "ECDHE-RSA-AES128-GCM-SHA256",
)
CURVE_PREFERENCES = ("secp521r1", "secp384r1", "prime256v1")


class TimeoutRequestHandler(WSGIRequestHandler):
    """Werkzeug's handler with per-connection timeouts.

    ``timeout`` bounds each socket read and write while a request is in
    flight.  Between keep-alive requests the connection may sit idle for
    ``idle_timeout`` seconds before it is closed.
    """

    timeout = max(READ_TIMEOUT, WRITE_TIMEOUT)
    idle_timeout = IDLE_TIMEOUT

    def handle_one_request(self):
        self.connection.settimeout(self.idle_timeout)
        try:
            waiting = self.rfile.peek(1)
        except OSError:
            waiting = b""
        if not waiting:
            self.close_connection = True
            return
        self.connection.settimeout(self.timeout)
        super().handle_one_request()

    def log_request(self, code="-", size="-"):
        # access lines come from LoggingMiddleware
        pass


def build_tls_context(cert_file: str, key_file: str) -> ssl.SSLContext:
    ctx = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
    ctx.minimum_version = ssl.TLSVersion.TLSv1_2
    ctx.options |= ssl.OP_CIPHER_SERVER_PREFERENCE
    ctx.set_ciphers(":".join(CIPHER_SUITES))
    if hasattr(ctx, "set_groups"):
        ctx.set_groups(":".join(CURVE_PREFERENCES))
    else:
        logger.debug("ssl module cannot set key exchange groups, using OpenSSL defaults")
    ctx.load_cert_chain(cert_file, key_file)
    return ctx


def build_server(app, address, ssl_context=None):
    """A threaded Werkzeug server bound to ``address``, not yet serving."""
    host, port = address
    return make_server(
        host,
        port,
        app,
        threaded=True,
        request_handler=TimeoutRequestHandler,
        ssl_context=ssl_context,
    )


def _serve(app, address, ssl_context=None):
    srv = build_server(app, address, ssl_context)
    scheme = "https" if ssl_context is not None else "http"
    logger.info("Serving on %s://%s:%d", scheme, *srv.server_address[:2])
    srv.serve_forever()


def start_plain(app, address):
    """Serve HTTP on ``address`` until the listener fails."""
    _serve(app, address)


def start_secure(app, address, cert_file, key_file):
    """Serve HTTPS on ``address``; certificate errors propagate."""
    _serve(app, address, ssl_context=build_tls_context(cert_file, key_file))


def run(app, config):
    address = config.listen_address()
    if config.tls_enabled:
        start_secure(app, address, config.CERT_FILE, config.KEY_FILE)
    else:
        logger.info("No certificate configured; set CERT_FILE and KEY_FILE to enable HTTPS")
        start_plain(app, address)


def main(environ=None):
    try:
        config = Config(environ)
    except ValueError as e:
        logging.basicConfig(level=logging.INFO)
        logger.critical("Invalid configuration: %s", e)
        sys.exit(1)

    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = create_app(config)
    try:
        run(app, config)
    except OSError as e:
        logger.critical("Could not start server: %s", e)
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Shutting down")


if __name__ == "__main__":
    main()

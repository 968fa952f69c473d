import logging
import os
from pathlib import Path

PACKAGE_DIR = Path(__file__).resolve().parent


class Config:
    """Configuration for the Flask app and its listener.

    Values are read once from the environment (or from ``environ`` when one
    is passed, which the tests use).

    - ``HTTP_PORT`` / ``HTTPS_PORT``: plain and secure listen ports.  Only one
      of them is used; which one depends on ``tls_enabled``.
    - ``CERT_FILE`` / ``KEY_FILE``: certificate chain and private key.  When
      both are set the server starts in secure mode.
    - ``TEMPLATES_DIR`` / ``STATIC_DIR``: the page templates and the assets
      served verbatim under ``/static/``.
    - ``LOG_LEVEL``: level handed to ``logging.basicConfig`` at startup.  An
      unknown level name raises ``ValueError``.
    """

    def __init__(self, environ=None):
        env = os.environ if environ is None else environ
        self.HTTP_PORT = int(env.get("HTTP_PORT") or 8080)
        self.HTTPS_PORT = int(env.get("HTTPS_PORT") or 8443)
        self.CERT_FILE = env.get("CERT_FILE") or None
        self.KEY_FILE = env.get("KEY_FILE") or None
        self.BIND_HOST = env.get("BIND_HOST") or "0.0.0.0"
        self.TEMPLATES_DIR = os.path.abspath(env.get("TEMPLATES_DIR") or PACKAGE_DIR / "templates")
        self.STATIC_DIR = os.path.abspath(env.get("STATIC_DIR") or PACKAGE_DIR / "static")
        self.LOG_LEVEL = (env.get("LOG_LEVEL") or "INFO").upper()
        if not isinstance(logging.getLevelName(self.LOG_LEVEL), int):
            raise ValueError(f"unknown LOG_LEVEL {self.LOG_LEVEL!r}")

    @property
    def tls_enabled(self) -> bool:
        return bool(self.CERT_FILE and self.KEY_FILE)

    def listen_address(self) -> tuple[str, int]:
        port = self.HTTPS_PORT if self.tls_enabled else self.HTTP_PORT
        return self.BIND_HOST, port

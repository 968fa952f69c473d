"""Template resolution for the documentation pages.

Templates are parsed once at startup and kept in a read-only mapping keyed
by their path relative to the template root (``"index.html"``,
``"descriptions/aco.html"``).  Keying by the relative path rather than the
bare file name keeps ``index.html`` and ``descriptions/index.html`` apart.

If a template is missing from the mapping, or raises anything while
rendering, the file is served raw from disk when it exists.  Otherwise the
client gets a 404 naming the template.
"""

import logging
import os
from pathlib import Path
from types import MappingProxyType

from flask import Response, current_app, render_template, send_file
from jinja2 import TemplateError
from werkzeug.security import safe_join

logger = logging.getLogger(__name__)

TEMPLATE_GLOBS = ("*.html", "descriptions/*.html")
HTML_MIMETYPE = "text/html"


class TemplateResolver:
    def __init__(self, env, root):
        self.env = env
        self.root = Path(root)
        self.templates = MappingProxyType(self._load())

    def _load(self) -> dict:
        loaded = {}
        for pattern in TEMPLATE_GLOBS:
            for path in sorted(self.root.glob(pattern)):
                name = path.relative_to(self.root).as_posix()
                try:
                    loaded[name] = self.env.get_template(name)
                except TemplateError as e:
                    logger.warning("Could not parse template %s: %s", name, e)
        logger.info("Loaded %d templates from %s", len(loaded), self.root)
        return loaded

    @property
    def names(self) -> list[str]:
        return sorted(self.templates)

    def render(self, name: str, **context) -> Response:
        """Render ``name`` with ``context``, falling back to the raw file."""
        template = self.templates.get(name)
        if template is None:
            current_app.logger.info("Template %s is not loaded, trying the file directly", name)
        else:
            try:
                body = render_template(template, **context)
            except Exception:
                current_app.logger.exception("Failed to render template %s", name)
            else:
                return Response(body, mimetype=HTML_MIMETYPE)
        return self.serve_file(name)

    def serve_file(self, name: str) -> Response:
        path = safe_join(str(self.root), name)
        if path is not None and os.path.isfile(path):
            return send_file(path, mimetype=HTML_MIMETYPE)
        current_app.logger.warning("Template file not found: %s", name)
        return Response(f"Template not found: {name}\n", status=404, mimetype="text/plain")

from flask import Flask

from .config import Config
from .middleware import apply_middleware
from .resolver import TemplateResolver


def create_app(config=None, testing: bool=False):
    config = config or Config()
    app = Flask(
        __name__,
        template_folder=config.TEMPLATES_DIR,
        static_folder=config.STATIC_DIR,
        static_url_path="/static",
    )
    app.config.from_object(config)
    app.config["TESTING"] = testing
    app.json.sort_keys = False

    from .pages import bp as pages_bp, SlugConverter
    from .api import api as api_bp
    app.url_map.converters["slug"] = SlugConverter
    app.register_blueprint(pages_bp)
    app.register_blueprint(api_bp, url_prefix="/api/v1")

    app.extensions["swarmhub.templates"] = TemplateResolver(app.jinja_env, config.TEMPLATES_DIR)
    app.wsgi_app = apply_middleware(app.wsgi_app)

    return app

from flask import Blueprint, Response, current_app
from werkzeug.routing import BaseConverter

bp = Blueprint("pages", __name__)

# slug, title, one-line summary; order is the order shown on the index page
ALGORITHMS = (
    ("aco", "Ant Colony Optimization",
     "Artificial ants lay and follow pheromone trails to find short paths through a graph."),
    ("boids", "Boids",
     "Separation, alignment and cohesion produce flocking from purely local rules."),
    ("sds", "Stochastic Diffusion Search",
     "Agents test partial hypotheses and recruit each other to converge on the best match."),
    ("vicsek", "Vicsek Model",
     "Self-propelled particles align with noisy neighbours and undergo a phase transition to order."),
)
ALGORITHM_SLUGS = tuple(slug for slug, _, _ in ALGORITHMS)
ALGORITHM_RULE = f"any({', '.join(ALGORITHM_SLUGS)}):algorithm"


class SlugConverter(BaseConverter):
    """A single path segment without dots, so ``aco.html`` never matches
    the extensionless rule."""

    regex = r"[A-Za-z0-9_-]+"


def render_page(name: str, **context) -> Response:
    return current_app.extensions["swarmhub.templates"].render(name, **context)


@bp.get("/")
@bp.get("/index.html")
def index():
    return render_page(
        "index.html",
        algorithms=[{"slug": s, "title": t, "summary": d} for s, t, d in ALGORITHMS],
    )


@bp.get(f"/<{ALGORITHM_RULE}>")
@bp.get(f"/<{ALGORITHM_RULE}>.html")
def algorithm_page(algorithm):
    return render_page(f"{algorithm}.html")


@bp.get("/descriptions/<slug:name>")
@bp.get("/descriptions/<slug:name>.html")
def description(name):
    return render_page(f"descriptions/{name}.html")


@bp.get("/.well-known/acme-challenge/<token>")
def acme_challenge(token):
    # Placeholder: echoes the token, no challenge files are looked up
    return Response(f"ACME Challenge token: {token}", mimetype="text/plain")

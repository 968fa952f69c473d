import logging

import pytest
from swarmhub import create_app
from swarmhub.config import Config


@pytest.fixture()
def root(tmp_path):
    (tmp_path / "descriptions").mkdir()
    (tmp_path / "index.html").write_text("<h1>home {{ algorithms|length }}</h1>")
    (tmp_path / "aco.html").write_text("<p>ants</p>")
    (tmp_path / "descriptions" / "index.html").write_text("<p>description index</p>")
    (tmp_path / "descriptions" / "broken.html").write_text("{% if %}raw broken{% endif %}")
    (tmp_path / "descriptions" / "strict.html").write_text("value: {{ missing.attr }}")
    (tmp_path / "descriptions" / "div.html").write_text("x {{ 1 // 0 }}")
    return tmp_path


@pytest.fixture()
def app(root):
    return create_app(Config({"TEMPLATES_DIR": str(root)}), testing=True)


@pytest.fixture()
def resolver(app):
    return app.extensions["swarmhub.templates"]


def test_templates_keyed_by_relative_path(resolver):
    assert resolver.names == [
        "aco.html",
        "descriptions/div.html",
        "descriptions/index.html",
        "descriptions/strict.html",
        "index.html",
    ]


def test_same_file_name_in_different_directories(client):
    assert client.get("/").data == b"<h1>home 4</h1>"
    assert client.get("/descriptions/index").data == b"<p>description index</p>"


def test_template_set_is_read_only(resolver):
    with pytest.raises(TypeError):
        resolver.templates["aco.html"] = None


def test_unparsable_template_served_raw(client):
    r = client.get("/descriptions/broken")
    assert r.status_code == 200
    assert r.headers["Content-Type"] == "text/html; charset=utf-8"
    assert r.data == b"{% if %}raw broken{% endif %}"


def test_render_error_falls_back_to_file(client):
    r = client.get("/descriptions/strict.html")
    assert r.status_code == 200
    assert r.data == b"value: {{ missing.attr }}"


def test_runtime_error_falls_back_to_file(client, caplog):
    with caplog.at_level(logging.ERROR, logger="swarmhub"):
        r = client.get("/descriptions/div")
    assert r.status_code == 200
    assert r.data == b"x {{ 1 // 0 }}"
    [record] = caplog.records
    assert record.getMessage() == "Failed to render template descriptions/div.html"
    assert record.exc_info[0] is ZeroDivisionError


def test_file_added_after_startup_served_raw(client, root):
    (root / "descriptions" / "late.html").write_text("<p>{{ not rendered }}</p>")
    r = client.get("/descriptions/late")
    assert r.status_code == 200 and r.data == b"<p>{{ not rendered }}</p>"


def test_missing_template_is_404(client):
    r = client.get("/descriptions/nope")
    assert r.status_code == 404
    assert r.mimetype == "text/plain"
    assert r.data == b"Template not found: descriptions/nope.html\n"


def test_page_route_without_template(client):
    r = client.get("/boids.html")
    assert r.status_code == 404
    assert b"Template not found: boids.html" in r.data


def test_serve_file_rejects_traversal(app, resolver, root):
    (root.parent / "secret.html").write_text("secret")
    with app.test_request_context():
        r = resolver.serve_file("../secret.html")
    assert r.status_code == 404


def test_templates_not_reloaded(client, root):
    (root / "aco.html").write_text("<p>changed</p>")
    assert client.get("/aco").data == b"<p>ants</p>"

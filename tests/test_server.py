import dataclasses
import json
from wsgiref.util import setup_testing_defaults

import pytest

from tubely.config import Config
from tubely.database import Client
from tubely.server import App, main


@pytest.fixture
def app(tmp_path):
    app_root = tmp_path / "app"
    assets_root = tmp_path / "assets"
    app_root.mkdir()
    assets_root.mkdir()
    config = Config.from_env(
        {
            "DB_PATH": str(tmp_path / "tubely.db"),
            "JWT_SECRET": "secret",
            "PLATFORM": "dev",
            "FILEPATH_ROOT": str(app_root),
            "ASSETS_ROOT": str(assets_root),
            "S3_BUCKET": "bucket",
            "S3_REGION": "us-east-2",
            "S3_CF_DISTRO": "distro",
            "PORT": "8091",
        }
    )
    db = Client(config.db_path)
    yield App(config, db)
    db.close()


def test_reset_in_dev_clears_database(app):
    app.db.create_user("someone@example.com", "password")
    response = app.dispatch("POST", "/admin/reset")
    assert response.status == 200
    assert response.body == b"Database reset to initial state"
    assert app.db.get_users() == []


def test_reset_forbidden_outside_dev(app):
    app.config = dataclasses.replace(app.config, platform="prod")
    user = app.db.create_user("someone@example.com", "password")
    response = app.dispatch("POST", "/admin/reset")
    assert response.status == 403
    assert response.body == b"Reset is only allowed in dev environment."
    assert app.db.get_user(user.id) == user


def test_reset_requires_post(app):
    response = app.dispatch("GET", "/admin/reset")
    assert response.status == 405
    assert response.headers["Allow"] == "POST"


def test_video_get_invalid_id(app):
    response = app.dispatch("GET", "/api/videos/not-a-uuid")
    assert response.status == 400
    assert json.loads(response.body) == {"error": "Invalid video ID"}


def test_video_get_missing(app):
    response = app.handle_video_get("00000000-0000-0000-0000-000000000001")
    assert response.status == 404
    assert json.loads(response.body) == {"error": "Couldn't get video"}


def test_video_get_existing(app):
    user = app.db.create_user("someone@example.com", "password")
    video = app.db.create_video("Clip", "A clip", user.id)
    response = app.dispatch("GET", f"/api/videos/{video.id}")
    assert response.status == 200
    assert json.loads(response.body) == video.to_dict()


def test_static_app_serves_index(app, tmp_path):
    (tmp_path / "app" / "index.html").write_text("<h1>hi</h1>")
    response = app.dispatch("GET", "/app/")
    assert response.status == 200
    assert response.body == b"<h1>hi</h1>"
    assert response.headers["Content-Type"].startswith("text/html")


def test_assets_are_not_cached(app, tmp_path):
    (tmp_path / "assets" / "thumb.png").write_bytes(b"\x89PNG")
    response = app.dispatch("GET", "/assets/thumb.png")
    assert response.status == 200
    assert response.body == b"\x89PNG"
    assert response.headers["Cache-Control"] == "no-store"
    assert response.headers["Content-Type"] == "image/png"


def test_static_listing_and_missing(app, tmp_path):
    (tmp_path / "assets" / "a.png").write_bytes(b"x")
    listing = app.serve_static(str(tmp_path / "assets"), "/")
    assert listing.status == 200
    assert b'<a href="a.png">a.png</a>' in listing.body
    missing = app.serve_static(str(tmp_path / "assets"), "/nope.png")
    assert missing.status == 404


def test_static_rejects_parent_paths(app, tmp_path):
    response = app.serve_static(str(tmp_path / "app"), "/../tubely.db")
    assert response.status == 400


def test_prefix_without_slash_redirects(app):
    response = app.dispatch("GET", "/app")
    assert response.status == 301
    assert response.headers["Location"] == "/app/"


def test_unknown_route_is_404(app):
    response = app.dispatch("GET", "/nowhere")
    assert response.status == 404
    assert response.body == b"404 page not found\n"


def test_wsgi_call(app):
    environ = {"REQUEST_METHOD": "GET", "PATH_INFO": "/api/videos/bad"}
    setup_testing_defaults(environ)
    captured = {}

    def start_response(status, headers):
        captured["status"] = status
        captured["headers"] = dict(headers)

    body = b"".join(app(environ, start_response))
    assert captured["status"] == "400 Bad Request"
    assert captured["headers"]["Content-Length"] == str(len(body))
    assert json.loads(body) == {"error": "Invalid video ID"}


def test_main_exits_without_settings(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    for key in ("DB_PATH", "JWT_SECRET", "PLATFORM", "FILEPATH_ROOT", "ASSETS_ROOT",
                "S3_BUCKET", "S3_REGION", "S3_CF_DISTRO", "PORT"):
        monkeypatch.delenv(key, raising=False)
    with pytest.raises(SystemExit) as exc:
        main([])
    assert exc.value.code == 1
"""The HTTP application and the command that serves it."""

from __future__ import annotations

import argparse
import html
import logging
import mimetypes
import sqlite3
import uuid
from http import HTTPStatus
from pathlib import Path
from typing import Any, Callable, Iterable, Optional
from urllib.parse import quote

from dotenv import load_dotenv

from .config import Config, ConfigError
from .database import Client
from .responses import Response, error_response, json_response, no_store, text_response

logger = logging.getLogger(__name__)

_NOT_FOUND = "404 page not found\n"


def _redirect(location: str) -> Response:
    return Response(HTTPStatus.MOVED_PERMANENTLY, {"Location": location})


def _method_not_allowed(allowed: str) -> Response:
    response = text_response(HTTPStatus.METHOD_NOT_ALLOWED, "Method Not Allowed\n")
    response.headers["Allow"] = allowed
    return response


def _content_type(name: str) -> str:
    guessed = mimetypes.guess_type(name)[0] or "application/octet-stream"
    if guessed.startswith("text/"):
        guessed += "; charset=utf-8"
    return guessed


class App:
    """Routes requests to the static file trees and the API handlers."""

    def __init__(self, config: Config, db: Client) -> None:
        self.config = config
        self.db = db

    def dispatch(self, method: str, path: str) -> Response:
        method = method.upper()
        if path in ("/app", "/assets"):
            return _redirect(path + "/")
        if path.startswith("/app/"):
            return self.serve_static(self.config.filepath_root, path[len("/app"):])
        if path.startswith("/assets/"):
            return no_store(self.serve_static(self.config.assets_root, path[len("/assets"):]))
        if path == "/admin/reset":
            if method != "POST":
                return _method_not_allowed("POST")
            return self.handle_reset()
        prefix = "/api/videos/"
        if path.startswith(prefix):
            video_id = path[len(prefix):]
            if video_id and "/" not in video_id:
                if method not in ("GET", "HEAD"):
                    return _method_not_allowed("GET, HEAD")
                return self.handle_video_get(video_id)
        return text_response(HTTPStatus.NOT_FOUND, _NOT_FOUND)

    def handle_reset(self) -> Response:
        if self.config.platform != "dev":
            return text_response(HTTPStatus.FORBIDDEN, "Reset is only allowed in dev environment.")
        try:
            self.db.reset()
        except (RuntimeError, sqlite3.Error) as err:
            return error_response(HTTPStatus.INTERNAL_SERVER_ERROR, "Couldn't reset database", err)
        return text_response(HTTPStatus.OK, "Database reset to initial state")

    def handle_video_get(self, video_id: str) -> Response:
        try:
            parsed = uuid.UUID(video_id)
        except ValueError as err:
            return error_response(HTTPStatus.BAD_REQUEST, "Invalid video ID", err)
        try:
            video = self.db.get_video(parsed)
        except sqlite3.Error as err:
            return error_response(HTTPStatus.NOT_FOUND, "Couldn't get video", err)
        if video is None:
            return error_response(HTTPStatus.NOT_FOUND, "Couldn't get video", None)
        return json_response(HTTPStatus.OK, video)

    def serve_static(self, root: str, relative_path: str) -> Response:
        """Serve a file or directory from ``root``, as a file server would."""
        if not relative_path.startswith("/"):
            relative_path = "/" + relative_path
        parts = [part for part in relative_path.split("/") if part not in ("", ".")]
        if ".." in parts:
            return text_response(HTTPStatus.BAD_REQUEST, "invalid URL path\n")
        if relative_path.endswith("/index.html"):
            return _redirect("./")
        target = Path(root).joinpath(*parts)
        try:
            if target.is_dir():
                if not relative_path.endswith("/"):
                    return _redirect(parts[-1] + "/")
                index = target / "index.html"
                if index.is_file():
                    return self._file_response(index)
                return self._listing(target)
            if target.is_file():
                return self._file_response(target)
        except OSError as err:
            logger.error("%s", err)
            return text_response(HTTPStatus.INTERNAL_SERVER_ERROR, "500 Internal Server Error\n")
        return text_response(HTTPStatus.NOT_FOUND, _NOT_FOUND)

    @staticmethod
    def _file_response(path: Path) -> Response:
        return Response(HTTPStatus.OK, {"Content-Type": _content_type(path.name)}, path.read_bytes())

    @staticmethod
    def _listing(directory: Path) -> Response:
        lines = ['<!doctype html>', '<meta name="viewport" content="width=device-width">', "<pre>"]
        for entry in sorted(directory.iterdir(), key=lambda item: item.name):
            name = entry.name + ("/" if entry.is_dir() else "")
            lines.append(f'<a href="{quote(name)}">{html.escape(name)}</a>')
        lines.append("</pre>")
        body = ("\n".join(lines) + "\n").encode("utf-8")
        return Response(HTTPStatus.OK, {"Content-Type": "text/html; charset=utf-8"}, body)

    def __call__(
        self, environ: dict[str, Any], start_response: Callable[..., Any]
    ) -> Iterable[bytes]:
        method = environ.get("REQUEST_METHOD", "GET")
        path = environ.get("PATH_INFO", "") or "/"
        response = self.dispatch(method, path)
        status = HTTPStatus(response.status)
        headers = dict(response.headers)
        headers["Content-Length"] = str(len(response.body))
        start_response(f"{status.value} {status.phrase}", list(headers.items()))
        if method.upper() == "HEAD":
            return [b""]
        return [response.body]


def main(argv: Optional[list[str]] = None) -> None:
    """Load settings, open the database and serve until interrupted."""
    parser = argparse.ArgumentParser(prog="tubely", description="Serve the video metadata API.")
    parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(message)s")

    load_dotenv(".env")
    try:
        config = Config.from_env()
    except ConfigError as err:
        logger.error("%s", err)
        raise SystemExit(1) from err
    try:
        db = Client(config.db_path)
    except sqlite3.Error as err:
        logger.error("Couldn't connect to database: %s", err)
        raise SystemExit(1) from err
    try:
        config.ensure_assets_dir()
    except OSError as err:
        logger.error("Couldn't create assets directory: %s", err)
        raise SystemExit(1) from err

    from wsgiref.simple_server import make_server

    app = App(config, db)
    with db, make_server("", int(config.port), app) as server:
        logger.info("Serving on: http://localhost:%s/app/", config.port)
        try:
            server.serve_forever()
        except KeyboardInterrupt:
            pass
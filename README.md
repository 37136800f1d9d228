# tubely

A small HTTP server for a video-sharing app. It keeps users, refresh tokens
and video metadata in SQLite, serves a static front end and a directory of
stored assets, and comes with helpers for naming media files and sorting
videos by aspect ratio.

## Install

```
pip install .
```

The helpers `tubely.assets.process_video_for_fast_encoding` and
`tubely.assets.get_video_aspect_ratio` run `ffmpeg` and `ffprobe`, so those
need to be on your `PATH` if you use them. The server itself does not call
them.

## Configuration

Settings are read from the environment by `tubely.config.Config.from_env`.
When started with the `tubely` command, a `.env` file in the working
directory is loaded first if it exists. Every variable is required; if one
is missing or empty, `Config.from_env` raises `ConfigError` and the command
logs the message and exits with status 1.

| Variable        | Used for                                              |
|-----------------|-------------------------------------------------------|
| `DB_PATH`       | Path of the SQLite database file                      |
| `JWT_SECRET`    | Required, but not used by any route in this package   |
| `PLATFORM`      | `dev` enables `POST /admin/reset`                     |
| `FILEPATH_ROOT` | Directory served under `/app/`                        |
| `ASSETS_ROOT`   | Directory served under `/assets/`; created if missing |
| `S3_BUCKET`     | Bucket name in `Config.object_url`                    |
| `S3_REGION`     | Region in `Config.object_url`                         |
| `S3_CF_DISTRO`  | Required, stored on the config                        |
| `PORT`          | Port to listen on, and used in `Config.asset_url`     |

Example `.env`:

```
DB_PATH=./tubely.db
JWT_SECRET=secret
PLATFORM=dev
FILEPATH_ROOT=./app
ASSETS_ROOT=./assets
S3_BUCKET=tubely-example
S3_REGION=us-east-1
S3_CF_DISTRO=placeholder
PORT=8091
```

## Running

```
tubely
```

This opens the database (creating its tables if needed), creates the assets
directory if it does not exist, and serves on all interfaces at `PORT`
using the standard library's WSGI server until interrupted. The front end is
then at `http://localhost:<PORT>/app/`.

## Routes

- `GET /api/videos/{videoID}` (also `HEAD`): the video's metadata as JSON.
  An ID that is not a UUID gives 400 `{"error": "Invalid video ID"}`; an
  unknown video gives 404 `{"error": "Couldn't get video"}`.
- `POST /admin/reset`: delete every row of every table. Only when
  `PLATFORM=dev`; otherwise 403 with a plain-text message.
- `/app/...`: files from `FILEPATH_ROOT`. Directories serve their
  `index.html` or else a listing; `/app` and directories without a trailing
  slash redirect; paths with `..` give 400.
- `/assets/...`: files from `ASSETS_ROOT`, served the same way, always with
  `Cache-Control: no-store`.

Other paths give 404; a wrong method on a known route gives 405 with an
`Allow` header.

## Using the pieces directly

`tubely.server.App` is a WSGI application; `App.dispatch(method, path)`
returns a `tubely.responses.Response` (status, headers, body) without going
through WSGI.

```python
from tubely.database import Client

with Client("tubely.db") as db:
    user = db.create_user("someone@example.com", "password")
    video = db.create_video("Clip", "A short clip", user.id)
    print(video.to_dict())
```

`Client` also has methods for refresh tokens (`create_refresh_token`,
`get_refresh_token`, `revoke_refresh_token`, `delete_refresh_token`),
users (`get_users`, `get_user`, `get_user_by_email`,
`get_user_by_refresh_token`, `delete_user`) and videos (`get_videos`,
`get_video`, `update_video`, `delete_video`), plus `reset`. Lookups return
`None` when nothing matches. Passwords are stored exactly as given.

`tubely.assets` has `get_asset_path` (a random URL-safe name with an
extension from `media_type_to_ext`), `aspect_ratio_label` and
`get_video_aspect_ratio` (which classify as `16:9`, `9:16` or `other`), and
`find_folder_for_video_aspect_ratio` (which puts a key under `landscape/`,
`portrait/` or `other/`).

`tubely.responses` has `json_response`, `error_response`, `text_response`
and `no_store`.

## What it does not do

The HTTP server has no routes for signing up, logging in, refreshing or
revoking tokens, creating, listing or deleting videos, or uploading
thumbnails and videos. It does not issue or check access tokens, hash
passwords, or upload anything to object storage; `Config.object_url` only
builds the URL an object would have.
"""Helpers for naming, locating and inspecting uploaded media files."""

from __future__ import annotations

import base64
import json
import os
import subprocess

_ASPECT_FOLDERS = {
    "16:9": "landscape",
    "9:16": "portrait",
}


def process_video_for_fast_encoding(file_path: str) -> str:
    """Rewrite an MP4 with its metadata moved to the front.

    Returns the path of the new file. Raises ``subprocess.CalledProcessError``
    if ffmpeg fails and ``OSError`` if it cannot be started.
    """
    new_file = file_path + ".processing"
    subprocess.run(
        [
            "ffmpeg",
            "-i",
            file_path,
            "-c",
            "copy",
            "-movflags",
            "faststart",
            "-f",
            "mp4",
            new_file,
        ],
        check=True,
    )
    return new_file


def find_folder_for_video_aspect_ratio(aspect_ratio: str, file_name: str) -> str:
    """Prefix a storage key with the folder for its aspect ratio."""
    folder = _ASPECT_FOLDERS.get(aspect_ratio, "other")
    return f"{folder}/{file_name}"


def get_asset_path(media_type: str) -> str:
    """Return a fresh random file name with an extension for the media type."""
    asset_id = base64.urlsafe_b64encode(os.urandom(32)).rstrip(b"=").decode("ascii")
    return asset_id + media_type_to_ext(media_type)


def media_type_to_ext(media_type: str) -> str:
    """Map ``type/subtype`` to ``.subtype``; anything else maps to ``.bin``."""
    parts = media_type.split("/")
    if len(parts) != 2:
        return ".bin"
    return "." + parts[1]


def approx(a: float, b: float) -> bool:
    """True when the two values differ by at most 0.01."""
    return abs(a - b) <= 0.01


def aspect_ratio_label(width: float, height: float) -> str:
    """Classify dimensions as ``16:9``, ``9:16`` or ``other``."""
    if height == 0:
        return "other"
    ratio = width / height
    if approx(16 / 9, ratio):
        return "16:9"
    if approx(9 / 16, ratio):
        return "9:16"
    return "other"


def get_video_aspect_ratio(file_path: str) -> str:
    """Probe a video with ffprobe and classify its first stream's shape.

    Raises ``ValueError`` if the probe output is not JSON or lists no streams.
    """
    result = subprocess.run(
        ["ffprobe", "-v", "error", "-print_format", "json", "-show_streams", file_path],
        stdout=subprocess.PIPE,
        check=False,
    )
    data = json.loads(result.stdout or b"")
    streams = data.get("streams") if isinstance(data, dict) else None
    if not streams:
        raise ValueError(f"no streams found in {file_path}")
    first = streams[0]
    return aspect_ratio_label(float(first.get("width", 0)), float(first.get("height", 0)))
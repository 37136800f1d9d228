"""Server configuration read from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional


class ConfigError(Exception):
    """A required setting is missing."""


_REQUIRED = (
    ("db_path", "DB_PATH", "DB_URL must be set"),
    ("jwt_secret", "JWT_SECRET", "JWT_SECRET environment variable is not set"),
    ("platform", "PLATFORM", "PLATFORM environment variable is not set"),
    ("filepath_root", "FILEPATH_ROOT", "FILEPATH_ROOT environment variable is not set"),
    ("assets_root", "ASSETS_ROOT", "ASSETS_ROOT environment variable is not set"),
    ("s3_bucket", "S3_BUCKET", "S3_BUCKET environment variable is not set"),
    ("s3_region", "S3_REGION", "S3_REGION environment variable is not set"),
    ("s3_cf_distribution", "S3_CF_DISTRO", "S3_CF_DISTRO environment variable is not set"),
    ("port", "PORT", "PORT environment variable is not set"),
)


@dataclass(frozen=True)
class Config:
    """Settings the server needs to run."""

    db_path: str
    jwt_secret: str
    platform: str
    filepath_root: str
    assets_root: str
    s3_bucket: str
    s3_region: str
    s3_cf_distribution: str
    port: str

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Config":
        """Build a config from environment variables; every one is required."""
        env = os.environ if environ is None else environ
        values = {}
        for attr, name, message in _REQUIRED:
            value = env.get(name, "")
            if not value:
                raise ConfigError(message)
            values[attr] = value
        return cls(**values)

    def ensure_assets_dir(self) -> None:
        """Create the assets directory if it does not exist."""
        if not os.path.exists(self.assets_root):
            os.mkdir(self.assets_root, 0o755)

    def object_url(self, key: str) -> str:
        return f"https://{self.s3_bucket}.s3.{self.s3_region}.amazonaws.com/{key}"

    def asset_disk_path(self, asset_path: str) -> str:
        return os.path.join(self.assets_root, asset_path)

    def asset_url(self, asset_path: str) -> str:
        return f"http://localhost:{self.port}/assets/{asset_path}"
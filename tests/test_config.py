import os

import pytest

from tubely.config import Config, ConfigError


def _env(tmp_path):
    return {
        "DB_PATH": str(tmp_path / "tubely.db"),
        "JWT_SECRET": "secret",
        "PLATFORM": "dev",
        "FILEPATH_ROOT": str(tmp_path / "app"),
        "ASSETS_ROOT": str(tmp_path / "assets"),
        "S3_BUCKET": "bucket",
        "S3_REGION": "us-east-2",
        "S3_CF_DISTRO": "distro",
        "PORT": "8091",
    }


def test_from_env_reads_all_settings(tmp_path):
    env = _env(tmp_path)
    config = Config.from_env(env)
    assert config.db_path == env["DB_PATH"]
    assert config.jwt_secret == env["JWT_SECRET"]
    assert config.platform == "dev"
    assert config.assets_root == env["ASSETS_ROOT"]
    assert config.s3_cf_distribution == "distro"
    assert config.port == "8091"


@pytest.mark.parametrize(
    "name, message",
    [
        ("DB_PATH", "DB_URL must be set"),
        ("JWT_SECRET", "JWT_SECRET environment variable is not set"),
        ("S3_CF_DISTRO", "S3_CF_DISTRO environment variable is not set"),
        ("PORT", "PORT environment variable is not set"),
    ],
)
def test_from_env_missing_setting(tmp_path, name, message):
    env = _env(tmp_path)
    del env[name]
    with pytest.raises(ConfigError, match=message):
        Config.from_env(env)


def test_from_env_treats_empty_as_missing(tmp_path):
    env = _env(tmp_path)
    env["PLATFORM"] = ""
    with pytest.raises(ConfigError, match="PLATFORM"):
        Config.from_env(env)


def test_from_env_defaults_to_process_environment(tmp_path, monkeypatch):
    for key, value in _env(tmp_path).items():
        monkeypatch.setenv(key, value)
    assert Config.from_env().s3_bucket == "bucket"


def test_ensure_assets_dir_creates_once(tmp_path):
    config = Config.from_env(_env(tmp_path))
    assert os.listdir(tmp_path) == []
    config.ensure_assets_dir()
    assert os.listdir(tmp_path) == ["assets"]
    kept = os.path.join(config.assets_root, "keep.txt")
    with open(kept, "w", encoding="utf-8") as handle:
        handle.write("data")
    config.ensure_assets_dir()
    assert os.listdir(config.assets_root) == ["keep.txt"]
    with open(kept, encoding="utf-8") as handle:
        assert handle.read() == "data"


def test_urls_and_paths(tmp_path):
    config = Config.from_env(_env(tmp_path))
    assert config.object_url("landscape/a.mp4") == "https://bucket.s3.us-east-2.amazonaws.com/landscape/a.mp4"
    assert config.asset_url("a.png") == "http://localhost:8091/assets/a.png"
    assert config.asset_disk_path("a.png") == os.path.join(config.assets_root, "a.png")
"""CLI tests for the imgstream entrypoint."""

import gzip
import hashlib
import json
import os
from pathlib import Path
from typing import Any

from click.testing import CliRunner

from imgstream.cli import cli


def _env_with_home(tmp_path: Path, **extra: str) -> dict[str, Any]:
    env = {key: value for key, value in os.environ.items() if not key.startswith("IMGSTREAM__")}
    env["HOME"] = str(tmp_path / "home")
    env.update(extra)
    return env


def test_cli_help_displays_commands() -> None:
    result = CliRunner().invoke(cli, ["--help"])

    assert result.exit_code == 0
    assert "imgstream inspects disk images" in result.output
    for command in ("mime", "read", "cat", "config"):
        assert command in result.output


def test_mime_resolves_extension_without_file(tmp_path: Path) -> None:
    result = CliRunner().invoke(
        cli, ["mime", str(tmp_path / "image.gz")], env=_env_with_home(tmp_path)
    )

    assert result.exit_code == 0
    assert result.output.strip() == "application/gzip"


def test_mime_sniffs_unknown_extension(tmp_path: Path) -> None:
    image = tmp_path / "image.img"
    image.write_bytes(gzip.compress(os.urandom(2048)))

    result = CliRunner().invoke(cli, ["mime", str(image), "--json"], env=_env_with_home(tmp_path))

    assert result.exit_code == 0
    payload = json.loads(result.output)
    assert payload == {"path": str(image), "mime_type": "application/gzip"}


def test_mime_uses_configured_fallback(tmp_path: Path) -> None:
    image = tmp_path / "image.img"
    image.write_bytes(bytes(1024))
    env = _env_with_home(
        tmp_path, IMGSTREAM__DETECTION__FALLBACK_MIME_TYPE="application/x-raw-disk-image"
    )

    result = CliRunner().invoke(cli, ["mime", str(image)], env=env)

    assert result.exit_code == 0
    assert result.output.strip() == "application/x-raw-disk-image"


def test_mime_reports_truncated_image(tmp_path: Path) -> None:
    image = tmp_path / "tiny.img"
    image.write_bytes(bytes(10))

    result = CliRunner().invoke(cli, ["mime", str(image)], env=_env_with_home(tmp_path))

    assert result.exit_code == 1
    assert "Looks like the image is truncated" in result.output


def test_mime_json_error_payload(tmp_path: Path) -> None:
    result = CliRunner().invoke(
        cli, ["mime", str(tmp_path / "missing.img"), "--json"], env=_env_with_home(tmp_path)
    )

    assert result.exit_code == 1
    payload = json.loads(result.output)
    assert payload["error"]["code"] == "filesystem_error"


def test_read_prints_hex_range(tmp_path: Path) -> None:
    image = tmp_path / "disk.img"
    image.write_bytes(bytes(range(16)))

    result = CliRunner().invoke(
        cli, ["read", str(image), "--count", "4", "--offset", "2"], env=_env_with_home(tmp_path)
    )

    assert result.exit_code == 0
    assert result.output.strip() == "02030405"


def test_read_json_reports_truncation(tmp_path: Path) -> None:
    image = tmp_path / "disk.img"
    image.write_bytes(bytes(8))

    result = CliRunner().invoke(
        cli,
        ["read", str(image), "--count", "16", "--json"],
        env=_env_with_home(tmp_path),
    )

    assert result.exit_code == 1
    payload = json.loads(result.output)
    assert payload["error"]["code"] == "truncated_input"


def test_cat_reports_size_and_digest(tmp_path: Path) -> None:
    image = tmp_path / "disk.img"
    payload = os.urandom(5000)
    image.write_bytes(payload)

    result = CliRunner().invoke(
        cli,
        ["cat", str(image), "--chunk-size", "1024", "--json"],
        env=_env_with_home(tmp_path),
    )

    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["size"] == 5000
    assert data["sha256"] == hashlib.sha256(payload).hexdigest()


def test_config_view_applies_environment(tmp_path: Path) -> None:
    env = _env_with_home(tmp_path, IMGSTREAM__DETECTION__SNIFF_BYTES="512")

    result = CliRunner().invoke(cli, ["config", "view"], env=env)
    ignored = CliRunner().invoke(cli, ["config", "view", "--no-env"], env=env)

    assert result.exit_code == 0
    assert "sniff_bytes: 512" in result.output
    assert "sniff_bytes: 262" in ignored.output


def test_config_path_honours_option(tmp_path: Path) -> None:
    custom = tmp_path / "custom.yaml"

    result = CliRunner().invoke(cli, ["--config", str(custom), "config", "path"])

    assert result.exit_code == 0
    assert result.output.strip() == str(custom)


def test_invalid_config_file_is_reported(tmp_path: Path) -> None:
    custom = tmp_path / "custom.yaml"
    custom.write_text("detection:\n  sniff_bytes: -1\n", encoding="utf-8")

    result = CliRunner().invoke(
        cli, ["--config", str(custom), "mime", str(tmp_path / "image.gz")]
    )

    assert result.exit_code == 1
    assert "Invalid configuration values" in result.output


def test_invalid_config_file_json_payload(tmp_path: Path) -> None:
    custom = tmp_path / "custom.yaml"
    custom.write_text("detection:\n  sniff_bytes: -1\n", encoding="utf-8")
    image = tmp_path / "disk.img"
    image.write_bytes(bytes(16))

    for args in (
        ["mime", str(tmp_path / "image.gz"), "--json"],
        ["read", str(image), "--count", "4", "--json"],
        ["cat", str(image), "--json"],
    ):
        result = CliRunner().invoke(cli, ["--config", str(custom), *args])

        assert result.exit_code == 1
        payload = json.loads(result.output)
        assert payload["error"]["code"] == "config_error"
        assert "Invalid configuration values" in payload["error"]["message"]

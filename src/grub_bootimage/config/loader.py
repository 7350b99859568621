from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from ..errors import ConfigError
from .models import BootimageConfig

# Location of the runner's table inside Cargo.toml
METADATA_KEY: str = "grub-bootimage"


def load_config(manifest_dir: str | Path | None) -> BootimageConfig:
    """
    Load the grub-bootimage configuration of a kernel crate.

    Args:
        manifest_dir (str | Path | None): Directory holding the crate's Cargo.toml,
            usually CARGO_MANIFEST_DIR.

    Returns:
        BootimageConfig: Parsed configuration. If the crate has no
            [package.metadata.grub-bootimage] table, an object with defaults is returned.

    Raises:
        ConfigError: If the manifest is missing, unreadable, not valid TOML,
            or the table contains unexpected keys or values.
    """
    if manifest_dir is None:
        raise ConfigError("CARGO_MANIFEST_DIR is not set; run through cargo")

    cargo_toml = Path(manifest_dir) / "Cargo.toml"
    try:
        with cargo_toml.open("rb") as f:
            content: dict[str, Any] = tomllib.load(f)
    except OSError as e:
        raise ConfigError(f"Failed to read {cargo_toml}: {e}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Failed to parse {cargo_toml}: {e}") from e

    # package and package.metadata may hold any TOML value; only tables can carry our key
    metadata: Any = content
    for key in ("package", "metadata"):
        metadata = metadata.get(key)
        if not isinstance(metadata, dict):
            return BootimageConfig()
    metadata = metadata.get(METADATA_KEY)
    if metadata is None:
        return BootimageConfig()
    if not isinstance(metadata, dict):
        raise ConfigError(f"{METADATA_KEY}: config invalid: {metadata!r}")

    try:
        return BootimageConfig.model_validate(metadata)
    except ValidationError as e:
        raise ConfigError(f"{METADATA_KEY}: {e}") from e

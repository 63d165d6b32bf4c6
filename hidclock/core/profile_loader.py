"""Profile loading and validation for YAML-based hidclock device profiles."""

from __future__ import annotations

import json
import logging
import os
import re
from dataclasses import dataclass
from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path
from typing import Any

import yaml
from jsonschema import ValidationError, validators

from hidclock.core.errors import ProfileLoadError, ProfileValidationError
from hidclock.core.model import DeviceIdentity, DeviceProfile

_HEX_ID_RE = re.compile(r"^(0x)?[0-9a-f]{1,4}$")
DEFAULT_PROFILE_ID = "ajazz_ak820"
LOGGER = logging.getLogger(__name__)


class UniqueKeyLoader(yaml.SafeLoader):
    """YAML loader that rejects duplicate mapping keys."""


def _construct_mapping(loader: UniqueKeyLoader, node: yaml.Node, deep: bool = False) -> dict[str, Any]:
    mapping: dict[str, Any] = {}
    for key_node, value_node in node.value:
        key = loader.construct_object(key_node, deep=deep)
        if key in mapping:
            raise ProfileValidationError(f"Duplicate key '{key}' in YAML document")
        mapping[key] = loader.construct_object(value_node, deep=deep)
    return mapping


UniqueKeyLoader.add_constructor(
    yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG,
    _construct_mapping,
)


@dataclass(frozen=True)
class LoadedProfiles:
    profiles: dict[str, DeviceProfile]
    warnings: tuple[str, ...]


def _load_schema_validator() -> Any:
    schema_text = resources.files("hidclock.schemas").joinpath("profile.schema.json").read_text(
        encoding="utf-8"
    )
    schema = json.loads(schema_text)
    validator_cls = validators.validator_for(schema)
    validator_cls.check_schema(schema)
    return validator_cls(schema)


def _profile_dirs() -> tuple[Path, Path]:
    xdg_config = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    xdg_data = Path(os.environ.get("XDG_DATA_HOME", Path.home() / ".local/share"))
    return xdg_config / "hidclock/profiles", xdg_data / "hidclock/profiles"


def _read_yaml(path: Path | Traversable) -> dict[str, Any]:
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ProfileLoadError(f"Could not read profile file {path}: {exc}") from exc

    try:
        loaded = yaml.load(content, Loader=UniqueKeyLoader)
    except yaml.YAMLError as exc:
        raise ProfileValidationError(f"Invalid YAML in {path}: {exc}") from exc

    if not isinstance(loaded, dict):
        raise ProfileValidationError(f"Profile file {path} must contain a mapping at root")
    return loaded


def parse_usb_id(value: str | int, *, context: str) -> int:
    """Parse a 16-bit USB identifier given as an int or a hex string ("0c45", "0x0c45")."""
    if isinstance(value, bool):
        raise ProfileValidationError(f"{context} must be a 16-bit USB id")
    if isinstance(value, int):
        number = value
    else:
        normalized = value.strip().lower()
        if not _HEX_ID_RE.match(normalized):
            raise ProfileValidationError(f"{context} must be a hex USB id like '0c45'")
        number = int(normalized, 16)
    if not 0 <= number <= 0xFFFF:
        raise ProfileValidationError(f"{context} must fit in 16 bits")
    return number


def _build_profile(doc: dict[str, Any], source: Path | Traversable) -> DeviceProfile:
    validator = _load_schema_validator()
    try:
        validator.validate(doc)
    except ValidationError as exc:
        path = ".".join(str(p) for p in exc.path)
        where = f" ({path})" if path else ""
        raise ProfileValidationError(f"Schema validation failed for {source}{where}: {exc.message}") from exc

    match = doc["match"]
    identity = DeviceIdentity(
        vendor_id=parse_usb_id(match["vendor_id"], context=f"{doc['id']}.match.vendor_id"),
        product_id=parse_usb_id(match["product_id"], context=f"{doc['id']}.match.product_id"),
        interface_number=int(match["interface_number"]),
    )
    delay_ms = doc.get("timing", {}).get("inter_stage_delay_ms", 50)

    return DeviceProfile(
        id=doc["id"],
        name=doc["name"],
        identity=identity,
        name_contains=tuple(match.get("name_contains", [])),
        inter_stage_delay_s=delay_ms / 1000.0,
    )


def _iter_packaged_profile_paths() -> list[Traversable]:
    profile_root = resources.files("hidclock.profiles")
    return [item for item in profile_root.iterdir() if item.name.endswith((".yml", ".yaml"))]


def _iter_user_profile_paths() -> list[Path]:
    paths: list[Path] = []
    for directory in _profile_dirs():
        if not directory.exists() or not directory.is_dir():
            continue
        paths.extend(sorted(p for p in directory.iterdir() if p.suffix in {".yml", ".yaml"}))
    return paths


def load_profiles() -> LoadedProfiles:
    profiles: dict[str, DeviceProfile] = {}
    warnings: list[str] = []

    for path in sorted(_iter_packaged_profile_paths(), key=lambda p: p.name):
        doc = _read_yaml(path)
        profile = _build_profile(doc, path)
        profiles[profile.id] = profile

    for path in _iter_user_profile_paths():
        doc = _read_yaml(path)
        profile = _build_profile(doc, path)
        if profile.id in profiles:
            warning = f"User profile '{profile.id}' overrides packaged profile"
            LOGGER.warning(warning)
            warnings.append(warning)
        profiles[profile.id] = profile

    return LoadedProfiles(profiles=profiles, warnings=tuple(warnings))

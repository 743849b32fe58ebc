"""YAML configuration file loading."""

import logging
from dataclasses import dataclass
from pathlib import Path

import yaml

from h2s.errors import H2sError
from h2s.models import DEFAULT_TABLE, AddressFamily, TableLocator, check_identifier

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = Path.home() / ".h2s"
DEFAULT_CONFIG_PATH = DEFAULT_CONFIG_DIR / "config.yaml"


@dataclass
class H2sConfig:
    """Defaults for the h2s tool, overridable on the command line.

    Every field has a default so the tool runs without a config file;
    only the set name then has to come from the command line.

    Attributes:
        record_type: ``"A"`` for IPv4 sets or ``"AAAA"`` for IPv6 sets.
        table: Table locator as ``"tabletype tablename"``.
        set_name: Name of the target set, or None if not configured.
        dig_binary: Path (or bare name for $PATH lookup) of ``dig``.
        nft_binary: Path (or bare name for $PATH lookup) of ``nft``.
        log_file: Also append log records to this file, if set.
        syslog: Also send log records to the local syslog daemon.
    """

    record_type: str = "AAAA"
    table: str = DEFAULT_TABLE
    set_name: str | None = None
    dig_binary: str = "dig"
    nft_binary: str = "nft"
    log_file: str | None = None
    syslog: bool = False

    @property
    def family(self) -> AddressFamily:
        return AddressFamily.from_record_type(self.record_type)

    @property
    def table_locator(self) -> TableLocator:
        return TableLocator.parse(self.table)


# Keys in the YAML file that map to H2sConfig fields.
_YAML_KEY_TO_FIELD: dict[str, str] = {
    "type": "record_type",
    "table": "table",
    "set_name": "set_name",
    "dig_binary": "dig_binary",
    "nft_binary": "nft_binary",
    "log_file": "log_file",
    "syslog": "syslog",
}


def load_config(path: Path | str | None = None) -> H2sConfig:
    """Load configuration from a YAML file.

    Args:
        path: Explicit path to a YAML config file.  If ``None``, the
            default location (``~/.h2s/config.yaml``) is tried.  If the
            default file doesn't exist, an ``H2sConfig`` with all defaults
            is returned silently.

    Returns:
        A populated and validated ``H2sConfig`` instance.

    Raises:
        FileNotFoundError: If an explicit *path* was given but doesn't exist.
        ConfigError: If the file contains invalid YAML, has an unexpected
            top-level structure, or holds an invalid value.
    """
    resolved = _resolve_path(path)

    if resolved is None:
        logger.debug("No config file found; using defaults")
        return H2sConfig()

    logger.debug("Loading config from %s", resolved)
    text = resolved.read_text(encoding="utf-8")

    try:
        raw = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {resolved}: {exc}") from exc

    if raw is None:
        # Empty file: all defaults.
        return H2sConfig()

    if not isinstance(raw, dict):
        raise ConfigError(
            f"Expected a YAML mapping at the top level in {resolved}, "
            f"got {type(raw).__name__}"
        )

    cfg = _build_config(raw, source=resolved)
    _validate(cfg, source=resolved)
    return cfg


class ConfigError(H2sError):
    """Raised when a configuration file is malformed or unreadable."""


# ------------------------------------------------------------------
# Internal helpers
# ------------------------------------------------------------------


def _resolve_path(path: Path | str | None) -> Path | None:
    """Return a concrete ``Path`` to read, or ``None`` if nothing to read.

    Raises:
        FileNotFoundError: If the caller supplied an explicit path that
            doesn't exist on disk.
    """
    if path is not None:
        p = Path(path).expanduser()
        if not p.is_file():
            raise FileNotFoundError(f"Config file not found: {p}")
        return p

    default = DEFAULT_CONFIG_PATH.expanduser()
    if default.is_file():
        return default
    return None


def _build_config(raw: dict, source: Path) -> H2sConfig:
    """Map raw YAML dict to an ``H2sConfig``, ignoring unknown keys."""
    kwargs: dict[str, object] = {}

    for yaml_key, field_name in _YAML_KEY_TO_FIELD.items():
        if yaml_key in raw:
            kwargs[field_name] = raw[yaml_key]

    unknown = set(raw) - set(_YAML_KEY_TO_FIELD)
    if unknown:
        logger.warning(
            "Ignoring unknown config keys in %s: %s",
            source,
            ", ".join(sorted(unknown)),
        )

    return H2sConfig(**kwargs)


def _validate(cfg: H2sConfig, source: Path) -> None:
    """Reject values that would only fail later, mid-run."""
    for yaml_key in ("type", "table", "dig_binary", "nft_binary"):
        if not isinstance(getattr(cfg, _YAML_KEY_TO_FIELD[yaml_key]), str):
            raise ConfigError(f"{source}: '{yaml_key}' must be a string")

    try:
        cfg.family
        cfg.table_locator
    except ValueError as exc:
        raise ConfigError(f"{source}: {exc}") from exc

    for yaml_key in ("set_name", "log_file"):
        value = getattr(cfg, _YAML_KEY_TO_FIELD[yaml_key])
        if value is not None and not isinstance(value, str):
            raise ConfigError(f"{source}: '{yaml_key}' must be a string")

    if cfg.set_name is not None:
        try:
            check_identifier(cfg.set_name, "set name")
        except ValueError as exc:
            raise ConfigError(f"{source}: {exc}") from exc
    if not isinstance(cfg.syslog, bool):
        raise ConfigError(f"{source}: 'syslog' must be true or false")

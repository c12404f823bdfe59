"""
Rustified Configuration Management
===================================

Centralized configuration for the rustified scanner using Python
dataclasses and TOML-based persistence.

Example ``config.toml``::

    [global]
    log_level = "INFO"
    log_file = "rustified.log"

    [scan]
    markers = ["rust_panic", "rust_eh_personality", "__rust_alloc"]
    workers = 4

References:
    - Wiggins, A. (2011). The Twelve-Factor App. https://12factor.net/
    - TOML v1.0.0 Specification. https://toml.io/en/v1.0.0
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any


# ---------------------------------------------------------------------------
# Default configuration file path relative to the project root
# ---------------------------------------------------------------------------
_DEFAULT_CONFIG_PATH: Path = Path(__file__).resolve().parent.parent / "config.toml"

# Substrings taken as evidence of the Rust runtime when no config overrides them
DEFAULT_MARKERS: tuple[str, ...] = ("rust_panic", "rust_eh_personality")


# ========================== Section Configs ================================


@dataclass(frozen=False, slots=True)
class ScanConfig:
    """Parameters of the directory scan.

    ``markers`` is the only knob that changes what counts as evidence;
    the rest only affect how files are fed to the scanner.
    """

    markers: list[str] = field(default_factory=lambda: list(DEFAULT_MARKERS))
    workers: int = 1
    max_file_size: int = 0  # 0 = no limit
    follow_symlinks: bool = False

    def __post_init__(self) -> None:
        """Reject values of the wrong TOML type.

        Raises:
            ValueError: On a non-list or non-string ``markers`` entry, or a
                non-integer size or worker count.
        """
        if not isinstance(self.markers, (list, tuple)):
            raise ValueError(
                f"scan.markers must be a list of strings, got {self.markers!r}"
            )
        for marker in self.markers:
            if not isinstance(marker, str) or not marker:
                raise ValueError(
                    f"scan.markers entries must be non-empty strings, got {marker!r}"
                )
        for name in ("workers", "max_file_size"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ValueError(f"scan.{name} must be a non-negative integer, got {value!r}")
        if self.workers < 1:
            raise ValueError(f"scan.workers must be at least 1, got {self.workers!r}")
        if not isinstance(self.follow_symlinks, bool):
            raise ValueError(
                f"scan.follow_symlinks must be a boolean, got {self.follow_symlinks!r}"
            )


@dataclass(frozen=False, slots=True)
class GlobalConfig:
    """Logging and general operational settings."""

    log_level: str = "WARNING"
    log_file: str = ""
    log_json: bool = False
    debug: bool = False


# =========================== Master Config =================================


@dataclass(frozen=False, slots=True)
class RustifiedConfig:
    """Master configuration aggregating all sections.

    Usage:
        >>> config = RustifiedConfig.load()                # from default path
        >>> config = RustifiedConfig.load("custom.toml")   # from custom path
        >>> config.scan.markers
        ['rust_panic', 'rust_eh_personality']
    """

    global_settings: GlobalConfig = field(default_factory=GlobalConfig)
    scan: ScanConfig = field(default_factory=ScanConfig)

    # ------------------------------------------------------------------ #
    #  TOML Loading
    # ------------------------------------------------------------------ #

    @classmethod
    def load(cls, path: str | Path | None = None) -> RustifiedConfig:
        """Load configuration from a TOML file.

        If *path* is ``None`` the loader looks for ``config.toml`` in the
        project root.  Missing keys fall back to dataclass defaults.

        Args:
            path: Filesystem path to a TOML configuration file.

        Returns:
            A fully-populated :class:`RustifiedConfig` instance.

        Raises:
            FileNotFoundError: If the specified path does not exist
                *and* was explicitly provided by the caller.
            tomllib.TOMLDecodeError: If the file is not valid TOML.
            ValueError: If a section or value has the wrong type.
        """
        config_path = Path(path) if path is not None else _DEFAULT_CONFIG_PATH

        if not config_path.exists():
            if path is not None:
                raise FileNotFoundError(
                    f"Configuration file not found: {config_path}"
                )
            return cls()

        with open(config_path, "rb") as fh:
            raw: dict[str, Any] = tomllib.load(fh)

        return cls(
            global_settings=cls._build_section(GlobalConfig, raw.get("global", {})),
            scan=cls._build_section(ScanConfig, raw.get("scan", {})),
        )

    # ------------------------------------------------------------------ #
    #  Helpers
    # ------------------------------------------------------------------ #

    def to_dict(self) -> dict[str, Any]:
        """Serialise the entire configuration tree to a plain dictionary."""
        return asdict(self)

    @staticmethod
    def _build_section(cls: type, data: dict[str, Any]) -> Any:
        """Instantiate a dataclass *cls* using only the keys it declares.

        Unknown keys in the TOML source are ignored.
        """
        if not isinstance(data, dict):
            raise ValueError(f"expected a TOML table for {cls.__name__}, got {data!r}")
        valid_keys = {f.name for f in cls.__dataclass_fields__.values()}  # type: ignore[attr-defined]
        filtered = {k: v for k, v in data.items() if k in valid_keys}
        return cls(**filtered)


"""Configuration loading and management for Kinetix Tools.

Settings are frozen dataclasses validated on construction. Later sources
override earlier ones:
    1. Defaults (AnalysisConfig, ConventionConfig)
    2. Global config (~/.kinetix-tools.toml)
    3. Project config (./kinetix-tools.toml)
    4. Explicit config file
    5. Environment variables (KINETIX_* prefix)
    6. CLI overrides (passed as kwargs)

Example:
    >>> config = load_config(verbose=True, workers=4)
    >>> config.verbosity
    'verbose'
    >>> config.conventions.dal_prefix
    'Dal'
"""

from __future__ import annotations

import os
import sys
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal, Optional

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from .exceptions import InvalidConfigError, InvalidPathError, KinetixToolsError

Verbosity = Literal["quiet", "normal", "verbose"]
StrategyName = Literal["semantic", "syntax"]
SeverityName = Literal["hidden", "info", "warning", "error"]

_STRATEGIES = ("semantic", "syntax")
_SEVERITIES = ("hidden", "info", "warning", "error")


@dataclass(frozen=True)
class ConventionConfig:
    """Architectural naming and marker conventions.

    Attributes:
        Declaration classification:
            dal_base_name: Class name that is always a data-access implementation
            dal_prefix: Name prefix of data-access classes (with the implementation marker)
            implementation_marker: Marker attribute of registered implementations
            contract_marker: Marker attribute of service contracts

        Scoping:
            business_assembly_suffix: Assembly name suffix of business implementation projects
            dal_folder: Directory holding data-access implementation files
            test_project_suffix: Suffix appended to a project name to find its test project

        Rule inputs:
            low_level_accessors: Deny-listed low-level persistence accessor names

        Generated tests:
            test_folder: Root folder of generated tests inside the test project
            test_base_class: Base class of generated test classes
            test_usings: Namespaces imported by every generated test
    """

    dal_base_name: str = "AbstractDal"
    dal_prefix: str = "Dal"
    implementation_marker: str = "RegisterImpl"
    contract_marker: str = "RegisterContract"

    business_assembly_suffix: str = "Implementation"
    dal_folder: str = "DAL.Implementation"
    test_project_suffix: str = ".Test"

    low_level_accessors: tuple[str, ...] = ("GetSqlCommand", "GetBroker")

    test_folder: str = "DAL"
    test_base_class: str = "DalTest"
    test_usings: tuple[str, ...] = (
        "System",
        "Microsoft.VisualStudio.TestTools.UnitTesting",
        "Kinetix.Test",
    )

    def __post_init__(self) -> None:
        """Validate conventions."""
        for name in ("dal_base_name", "dal_prefix", "implementation_marker", "contract_marker"):
            if not getattr(self, name):
                raise InvalidConfigError(name, getattr(self, name), "must not be empty")
        if not self.low_level_accessors:
            raise InvalidConfigError(
                "low_level_accessors", self.low_level_accessors, "at least one accessor is required"
            )
        if Path(self.test_folder).is_absolute() or ".." in Path(self.test_folder).parts:
            raise InvalidConfigError(
                "test_folder", self.test_folder, "must be a relative path inside the test project"
            )


DEFAULT_CONVENTIONS = ConventionConfig()


@dataclass(frozen=True)
class AnalysisConfig:
    """Configuration for analysis and generation runs.

    Attributes:
        Performance tuning:
            workers: Number of parallel document workers (None = auto-detect)
            max_file_size_mb: Maximum source file size to analyze (MB)

        Rules:
            disabled_rules: Diagnostic ids that are not evaluated
            min_severity: Lowest severity reported to the user

        Generation:
            strategy: Test content strategy ("semantic" or "syntax")
            dal_file_filter: Only consider files inside the DAL implementation folder

        Output control:
            verbosity: Logging verbosity level

        Conventions:
            conventions: Naming and marker conventions (nested config)
    """

    workers: Optional[int] = None
    max_file_size_mb: float = 5.0

    disabled_rules: tuple[str, ...] = ()
    min_severity: SeverityName = "info"

    strategy: StrategyName = "semantic"
    dal_file_filter: bool = True

    verbosity: Verbosity = "normal"

    conventions: ConventionConfig = field(default_factory=ConventionConfig)

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.workers is not None and self.workers < 1:
            raise InvalidConfigError("workers", self.workers, "must be at least 1")
        if self.max_file_size_mb <= 0:
            raise InvalidConfigError("max_file_size_mb", self.max_file_size_mb, "must be positive")
        if self.strategy not in _STRATEGIES:
            raise InvalidConfigError("strategy", self.strategy, f"expected one of {_STRATEGIES}")
        if self.min_severity not in _SEVERITIES:
            raise InvalidConfigError(
                "min_severity", self.min_severity, f"expected one of {_SEVERITIES}"
            )
        if self.verbosity not in ("quiet", "normal", "verbose"):
            raise InvalidConfigError("verbosity", self.verbosity, "expected quiet/normal/verbose")

    @property
    def max_file_size_bytes(self) -> int:
        """Get max file size in bytes."""
        return int(self.max_file_size_mb * 1024 * 1024)

    @property
    def worker_count(self) -> int:
        """Resolved worker count (CPU count capped at 8 when not set)."""
        if self.workers is not None:
            return self.workers
        return min(os.cpu_count() or 4, 8)


DEFAULT_CONFIG = AnalysisConfig()


def load_config(config_file: Optional[Path] = None, **overrides: Any) -> AnalysisConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides (typically from CLI flags). ``verbose`` and
            ``quiet`` booleans are folded into ``verbosity``; ``None`` values are ignored.

    Returns:
        Validated AnalysisConfig instance

    Raises:
        InvalidPathError: If the explicit config file does not exist
        KinetixToolsError: If a config file or value is invalid

    Example:
        >>> config = load_config(config_file=Path("kinetix-tools.toml"), strategy="syntax")
    """
    merged: dict[str, Any] = {}

    global_config = Path.home() / ".kinetix-tools.toml"
    if global_config.exists():
        _merge_file(merged, global_config, "global config")

    project_config = Path.cwd() / "kinetix-tools.toml"
    if project_config.exists():
        _merge_file(merged, project_config, "project config")

    if config_file is not None:
        if not config_file.exists():
            raise InvalidPathError(config_file, "Config file not found")
        _merge_file(merged, config_file, "config file")

    merged.update(_load_env_vars())

    if overrides.pop("verbose", False):
        overrides["verbosity"] = "verbose"
    if overrides.pop("quiet", False):
        overrides["verbosity"] = "quiet"

    merged.update({k: v for k, v in overrides.items() if v is not None})

    conventions = merged.pop("conventions", None)
    if isinstance(conventions, dict):
        try:
            merged["conventions"] = ConventionConfig(**_tuplify(conventions))
        except TypeError as e:
            raise KinetixToolsError(f"Invalid [conventions] config: {e}")
    elif isinstance(conventions, ConventionConfig):
        merged["conventions"] = conventions

    try:
        return AnalysisConfig(**_tuplify(merged))
    except TypeError as e:
        raise KinetixToolsError(f"Invalid configuration: {e}")


def _merge_file(merged: dict[str, Any], path: Path, label: str) -> None:
    """Merge one TOML file into ``merged``; nested [conventions] tables are merged key-wise."""
    try:
        data = _load_toml_file(path)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise KinetixToolsError(f"Invalid {label} '{path}': {e}")

    conventions = data.pop("conventions", None)
    merged.update(data)
    if isinstance(conventions, dict):
        base = merged.get("conventions")
        merged["conventions"] = {**(base if isinstance(base, dict) else {}), **conventions}


def _tuplify(values: dict[str, Any]) -> dict[str, Any]:
    """TOML arrays arrive as lists; frozen configs hold tuples."""
    return {k: tuple(v) if isinstance(v, list) else v for k, v in values.items()}


def _flag(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in ("true", "1", "yes", "on"):
        return True
    if lowered in ("false", "0", "no", "off"):
        return False
    raise ValueError(f"expected true/false, got '{value}'")


def _ids(value: str) -> tuple[str, ...]:
    return tuple(part.strip() for part in value.split(",") if part.strip())


# KINETIX_<FIELD> -> converter for the AnalysisConfig field of the same name
_ENV_CONVERTERS: dict[str, Callable[[str], Any]] = {
    "workers": int,
    "max_file_size_mb": float,
    "disabled_rules": _ids,
    "min_severity": str.lower,
    "strategy": str.lower,
    "dal_file_filter": _flag,
    "verbosity": str.lower,
}


def _load_env_vars() -> dict[str, Any]:
    """Settings from ``KINETIX_*`` environment variables.

    ``KINETIX_DISABLED_RULES`` is a comma-separated id list
    (``"KTA1103,KTA1300"``); ``KINETIX_DAL_FILE_FILTER`` accepts
    true/false, 1/0, yes/no, on/off. Conventions are file-only.

    Raises:
        KinetixToolsError: If a variable cannot be converted
    """
    result: dict[str, Any] = {}
    for name, convert in _ENV_CONVERTERS.items():
        env_key = f"KINETIX_{name.upper()}"
        raw = os.environ.get(env_key)
        if raw is None:
            continue
        try:
            result[name] = convert(raw)
        except ValueError as e:
            raise KinetixToolsError(f"Invalid {env_key}: {e}")
    return result


def _load_toml_file(path: Path) -> dict:
    with open(path, "rb") as f:
        return tomllib.load(f)

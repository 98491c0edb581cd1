"""Progress Insights config system: insights.toml reader and writer.

Lets a club tune the trend thresholds, the default week label, and the
output format via an ``insights.toml`` file in the working directory.
Falls back to built-in defaults when no config file is present.

Public API
----------
load_config(repo_path) -> InsightsConfig
save_default_config(repo_path) -> Path
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any, Optional

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # type: ignore[no-redef]

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "insights.toml"

# ---------------------------------------------------------------------------
# Default values (canonical source of truth)
# ---------------------------------------------------------------------------

DEFAULTS: dict[str, Any] = {
    "thresholds": {
        "improvement_pct": 10.0,        # time reduction that counts as improving
        "decline_pct": 10.0,            # time increase that counts as slipping
        "min_sessions": 2,
        "min_timed_values": 2,
        "min_qualitative_successes": 2,
    },
    "summary": {
        "week_label": "Week summary",
    },
    "output": {
        "format": "markdown",   # markdown | json | table
    },
}


class ConfigError(ValueError):
    """Raised when insights.toml cannot be parsed or holds invalid values."""


@dataclass(frozen=True)
class ThresholdsConfig:
    improvement_pct: float = 10.0
    decline_pct: float = 10.0
    min_sessions: int = 2
    min_timed_values: int = 2
    min_qualitative_successes: int = 2


@dataclass(frozen=True)
class SummaryConfig:
    week_label: str = "Week summary"


@dataclass(frozen=True)
class OutputConfig:
    format: str = "markdown"


@dataclass(frozen=True)
class InsightsConfig:
    thresholds: ThresholdsConfig = field(default_factory=ThresholdsConfig)
    summary: SummaryConfig = field(default_factory=SummaryConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    source: Optional[Path] = field(default=None, compare=False, repr=False)

    @classmethod
    def defaults(cls) -> "InsightsConfig":
        """Return a config populated entirely from built-in defaults."""
        return cls()

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        d.pop("source", None)
        return d

    def to_toml(self) -> str:
        """Render config as TOML."""
        lines = [
            "# insights.toml: configuration for progress-insights",
            "# Generated automatically. Edit to tune trend thresholds.",
            "",
        ]
        for section, values in self.to_dict().items():
            lines.append(f"[{section}]")
            for key, val in values.items():
                if isinstance(val, bool):
                    lines.append(f"{key} = {'true' if val else 'false'}")
                elif isinstance(val, str):
                    escaped = val.replace("\\", "\\\\").replace('"', '\\"')
                    lines.append(f'{key} = "{escaped}"')
                else:
                    lines.append(f"{key} = {val}")
            lines.append("")
        return "\n".join(lines)

    def to_markdown(self) -> str:
        """Render current config as a Markdown table for display."""
        lines = [
            "# Progress Insights Configuration",
            "",
            f"*Source: {self.source or 'built-in defaults'}*",
            "",
        ]
        for section, values in self.to_dict().items():
            lines.append(f"## [{section}]")
            lines.append("")
            lines.append("| Key | Value |")
            lines.append("| --- | ----- |")
            for key, val in values.items():
                lines.append(f"| `{key}` | `{val}` |")
            lines.append("")
        return "\n".join(lines)


def _merge_dict(base: dict, override: dict) -> dict:
    """Deep-merge override into base, returning a new dict."""
    result = dict(base)
    for key, val in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(val, dict):
            result[key] = _merge_dict(result[key], val)
        else:
            result[key] = val
    return result


def _number(section: dict, key: str, kind: type, minimum: int = 0) -> Any:
    raw = section[key]
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        raise ConfigError(f"thresholds.{key} must be a number, got {raw!r}")
    if raw < 0:
        raise ConfigError(f"thresholds.{key} must not be negative, got {raw!r}")
    if raw < minimum:
        raise ConfigError(f"thresholds.{key} must be at least {minimum}, got {raw!r}")
    if kind is int and raw != int(raw):
        raise ConfigError(f"thresholds.{key} must be a whole number, got {raw!r}")
    return kind(raw)


def config_from_dict(raw: dict[str, Any], source: Optional[Path] = None) -> InsightsConfig:
    """Build an InsightsConfig from a (partial) mapping merged over DEFAULTS."""
    merged = _merge_dict(DEFAULTS, raw)
    for section in DEFAULTS:
        if not isinstance(merged[section], dict):
            raise ConfigError(f"[{section}] must be a table")
    t = merged["thresholds"]
    return InsightsConfig(
        thresholds=ThresholdsConfig(
            improvement_pct=_number(t, "improvement_pct", float),
            decline_pct=_number(t, "decline_pct", float),
            min_sessions=_number(t, "min_sessions", int, minimum=2),
            min_timed_values=_number(t, "min_timed_values", int, minimum=2),
            min_qualitative_successes=_number(t, "min_qualitative_successes", int, minimum=1),
        ),
        summary=SummaryConfig(week_label=str(merged["summary"]["week_label"])),
        output=OutputConfig(format=str(merged["output"]["format"])),
        source=source,
    )


def load_config(repo_path: Optional[Path] = None) -> InsightsConfig:
    """Load config from insights.toml in repo_path, falling back to defaults."""
    if repo_path is None:
        repo_path = Path.cwd()
    config_path = repo_path / CONFIG_FILENAME
    if not config_path.exists():
        logger.debug("No %s in %s, using defaults", CONFIG_FILENAME, repo_path)
        return InsightsConfig.defaults()
    try:
        file_data = tomllib.loads(config_path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"{config_path}: {exc}") from exc
    logger.debug("Loaded config from %s", config_path)
    return config_from_dict(file_data, source=config_path)


def save_default_config(repo_path: Path) -> Path:
    """Write insights.toml with default values to repo_path."""
    config_path = repo_path / CONFIG_FILENAME
    config_path.write_text(InsightsConfig.defaults().to_toml(), encoding="utf-8")
    logger.info("Wrote default config to %s", config_path)
    return config_path

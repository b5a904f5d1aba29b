"""View and layout defaults from ``[tool.nbmolviz2d]`` in pyproject.toml.

Example section::

    [tool.nbmolviz2d]
    width = 640
    link-distance = 30
    strict = true
"""

from __future__ import annotations

import dataclasses
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from nbmolviz2d.exceptions import SimulationConfigError

logger = logging.getLogger(__name__)

SECTION = "nbmolviz2d"


@dataclass(frozen=True)
class VizConfig:
    """Defaults shared by the widget, the view and the CLI."""

    width: int = 400
    height: int = 300
    link_distance: float = 20.0
    link_strength: float = 1.0
    charge_strength: float = -30.0
    alpha_min: float = 0.001
    velocity_decay: float = 0.4
    strict: bool = False

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise SimulationConfigError(f"View size must be positive, got {self.width}x{self.height}")
        if not 0 < self.alpha_min < 1:
            raise SimulationConfigError(f"alpha_min must be in (0, 1), got {self.alpha_min}")
        if not 0 <= self.velocity_decay <= 1:
            raise SimulationConfigError(f"velocity_decay must be in [0, 1], got {self.velocity_decay}")

    @classmethod
    def from_mapping(cls, section: dict[str, Any]) -> VizConfig:
        """Build from a TOML table. Dashed keys are accepted; unknown keys are ignored."""
        types = {f.name: f.type for f in dataclasses.fields(cls)}
        values: dict[str, Any] = {}
        for raw_key, value in section.items():
            key = raw_key.replace("-", "_")
            if key not in types:
                logger.debug("Ignoring unknown [tool.%s] key %r", SECTION, raw_key)
                continue
            # Annotations are strings under postponed evaluation
            if types[key] == "float" and isinstance(value, int) and not isinstance(value, bool):
                value = float(value)
            values[key] = value
        return cls(**values)

    def with_overrides(self, **overrides: Any) -> VizConfig:
        """Copy with the non-None ``overrides`` applied."""
        return dataclasses.replace(self, **{k: v for k, v in overrides.items() if v is not None})


def find_pyproject(start: Path | None = None) -> Path | None:
    """Nearest pyproject.toml in ``start`` (default: cwd) or a parent."""
    here = (start or Path.cwd()).resolve()
    return next((d / "pyproject.toml" for d in (here, *here.parents) if (d / "pyproject.toml").is_file()), None)


def _read_toml(path: Path) -> dict[str, Any] | None:
    if sys.version_info >= (3, 11):
        import tomllib
    else:
        try:
            import tomli as tomllib
        except ImportError:
            logger.debug("tomli not installed, skipping %s", path)
            return None
    with path.open("rb") as f:
        return tomllib.load(f)


def load_config(start: Path | None = None) -> VizConfig:
    """Load the nearest ``[tool.nbmolviz2d]`` section, or defaults when there is none."""
    path = find_pyproject(start)
    data = _read_toml(path) if path is not None else None
    section = (data or {}).get("tool", {}).get(SECTION)
    if not section:
        return VizConfig()
    return VizConfig.from_mapping(section)

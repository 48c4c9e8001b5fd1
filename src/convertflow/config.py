#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/convertflow/config.py
"""Configuration for conversions: defaults, config files and environment.

Settings are resolved from three sources, lowest to highest priority:

1. the defaults in :mod:`convertflow.constants`,
2. a configuration file (explicit path, else discovered),
3. ``CONVERTFLOW_<FIELD>`` environment variables.

Configuration files may be ``.convertflow.toml``, ``.convertflow.yaml``,
``.convertflow.yml``, ``.convertflow.json`` or a ``[tool.convertflow]`` table in
``pyproject.toml``. Discovery walks from the working directory up to the
filesystem root and then checks the home directory.

Examples
--------
    >>> from convertflow.config import ConvertFlowConfig, load_config
    >>> config = load_config()
    >>> config.font_size
    11.0
    >>> ConvertFlowConfig().create_updated(image_quality=80).image_quality
    80

"""

from __future__ import annotations

import json
import logging
import os
import sys
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

if sys.version_info >= (3, 11):
    import tomllib
    from typing import Self
else:
    import tomli as tomllib  # type: ignore[import-not-found,unused-ignore]
    from typing_extensions import Self

import yaml

from convertflow.constants import (
    DEFAULT_FONT_NAME,
    DEFAULT_FONT_SIZE,
    DEFAULT_IMAGE_PAGE_BORDER,
    DEFAULT_IMAGE_QUALITY,
    DEFAULT_LINE_HEIGHT_RATIO,
    DEFAULT_PAGE_HEIGHT,
    DEFAULT_PAGE_MARGIN,
    DEFAULT_PAGE_WIDTH,
    DEFAULT_RECOMPRESS_QUALITY,
    DEFAULT_RENDER_SCALE,
    DEFAULT_TEXT_COLOR,
    PRODUCT_NAME,
)
from convertflow.exceptions import ConfigError

logger = logging.getLogger(__name__)

ENV_PREFIX = "CONVERTFLOW_"
CONFIG_ENV_VAR = "CONVERTFLOW_CONFIG"
CONFIG_FILENAMES = [".convertflow.toml", ".convertflow.yaml", ".convertflow.yml", ".convertflow.json"]
PYPROJECT_SECTION = "convertflow"


@dataclass(frozen=True)
class ConvertFlowConfig:
    """Settings shared by the transforms, the fallback and the operations.

    Parameters
    ----------
    page_width : float, default 595.0
        Page width in points for paginated text output
    page_height : float, default 842.0
        Page height in points for paginated text output
    margin : float, default 50.0
        Margin on every side of a text page, in points
    font_name : str, default "Helvetica"
        Standard PDF font used for text pages
    font_size : float, default 11.0
        Font size in points
    line_height_ratio : float, default 1.4
        Line advance as a multiple of the font size
    text_color : tuple of float, default (0.15, 0.15, 0.15)
        RGB fill colour of page text, each channel in [0, 1]
    image_quality : int, default 92
        Quality factor for lossy raster encoders
    recompress_quality : int, default 60
        JPEG quality used by the image compress operation
    render_scale : float, default 2.0
        Zoom used when rendering a document page to a raster image
    image_page_border : float, default 20.0
        Border in points around an image placed on its own PDF page
    fallback_tick_delay : float, default 0.0
        Seconds to sleep between fallback progress ticks
    product_name : str, default "ConvertFlow"
        Name written into placeholder artifacts

    """

    page_width: float = DEFAULT_PAGE_WIDTH
    page_height: float = DEFAULT_PAGE_HEIGHT
    margin: float = DEFAULT_PAGE_MARGIN
    font_name: str = DEFAULT_FONT_NAME
    font_size: float = DEFAULT_FONT_SIZE
    line_height_ratio: float = DEFAULT_LINE_HEIGHT_RATIO
    text_color: Tuple[float, float, float] = field(default=DEFAULT_TEXT_COLOR)
    image_quality: int = DEFAULT_IMAGE_QUALITY
    recompress_quality: int = DEFAULT_RECOMPRESS_QUALITY
    render_scale: float = DEFAULT_RENDER_SCALE
    image_page_border: float = DEFAULT_IMAGE_PAGE_BORDER
    fallback_tick_delay: float = 0.0
    product_name: str = PRODUCT_NAME

    def __post_init__(self) -> None:
        """Validate value ranges."""
        if self.page_width <= 2 * self.margin or self.page_height <= 2 * self.margin:
            raise ConfigError(
                f"Margin {self.margin} leaves no room on a {self.page_width}x{self.page_height} page"
            )
        if self.font_size <= 0:
            raise ConfigError(f"font_size must be positive, got {self.font_size}")
        if self.line_height_ratio <= 0:
            raise ConfigError(f"line_height_ratio must be positive, got {self.line_height_ratio}")
        for name in ("image_quality", "recompress_quality"):
            value = getattr(self, name)
            if not 1 <= value <= 100:
                raise ConfigError(f"{name} must be between 1 and 100, got {value}")
        if self.render_scale <= 0:
            raise ConfigError(f"render_scale must be positive, got {self.render_scale}")
        if self.fallback_tick_delay < 0:
            raise ConfigError(f"fallback_tick_delay cannot be negative, got {self.fallback_tick_delay}")
        if len(self.text_color) != 3 or not all(0 <= c <= 1 for c in self.text_color):
            raise ConfigError(f"text_color must be three values in [0, 1], got {self.text_color!r}")

    @property
    def line_height(self) -> float:
        """Line advance in points."""
        return self.font_size * self.line_height_ratio

    @property
    def content_width(self) -> float:
        """Usable line width in points."""
        return self.page_width - 2 * self.margin

    def create_updated(self, **kwargs: Any) -> Self:
        """Create a new instance with updated field values.

        Parameters
        ----------
        **kwargs : Any
            Field names and their new values

        Returns
        -------
        Self
            New instance with specified fields updated

        """
        return replace(self, **kwargs)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], source: Optional[str] = None) -> "ConvertFlowConfig":
        """Build a configuration from a plain mapping, coercing value types.

        Raises
        ------
        ConfigError
            If a key is unknown or a value cannot be coerced

        """
        known = {f.name: f for f in fields(cls)}
        values: Dict[str, Any] = {}
        for key, raw in data.items():
            name = str(key).replace("-", "_")
            if name not in known:
                raise ConfigError(f"Unknown configuration key '{key}'", source=source)
            values[name] = _coerce(name, raw, source)
        return cls(**values)


_FIELD_TYPES = {
    "page_width": float,
    "page_height": float,
    "margin": float,
    "font_name": str,
    "font_size": float,
    "line_height_ratio": float,
    "text_color": tuple,
    "image_quality": int,
    "recompress_quality": int,
    "render_scale": float,
    "image_page_border": float,
    "fallback_tick_delay": float,
    "product_name": str,
}


def _coerce(name: str, raw: Any, source: Optional[str]) -> Any:
    expected = _FIELD_TYPES[name]
    try:
        if expected is tuple:
            if isinstance(raw, str):
                raw = [part for part in raw.replace(",", " ").split() if part]
            return tuple(float(c) for c in raw)
        if expected is int:
            if isinstance(raw, bool) or (isinstance(raw, float) and not raw.is_integer()):
                raise ValueError(f"not an integer: {raw!r}")
            return int(raw)
        if expected is float:
            if isinstance(raw, bool):
                raise ValueError(f"not a number: {raw!r}")
            return float(raw)
        return str(raw)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid value for '{name}': {raw!r}", source=source, original_error=e) from e


def _load_pyproject_section(pyproject_path: Path) -> Dict[str, Any]:
    """Load the ``[tool.convertflow]`` table from a pyproject.toml file.

    Returns an empty dict when the table is absent.
    """
    try:
        with open(pyproject_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {pyproject_path}: {e}", source=str(pyproject_path), original_error=e) from e
    except OSError as e:
        raise ConfigError(f"Error reading {pyproject_path}: {e}", source=str(pyproject_path), original_error=e) from e

    section = data.get("tool", {}).get(PYPROJECT_SECTION)
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ConfigError(
            f"[tool.{PYPROJECT_SECTION}] in {pyproject_path} must be a table, got {type(section).__name__}",
            source=str(pyproject_path),
        )
    return section


def find_config_in_parents(start_dir: Optional[Path] = None) -> Optional[Path]:
    """Find a configuration file by walking up from ``start_dir``.

    Each directory is checked for the dedicated config files first, then for a
    pyproject.toml carrying a ``[tool.convertflow]`` table.

    Parameters
    ----------
    start_dir : Path, optional
        Starting directory, defaults to the current working directory

    Returns
    -------
    Path or None
        First configuration file found

    """
    current = (start_dir or Path.cwd()).resolve()

    while True:
        for filename in CONFIG_FILENAMES:
            config_path = current / filename
            if config_path.is_file():
                return config_path

        pyproject_path = current / "pyproject.toml"
        if pyproject_path.is_file():
            try:
                if _load_pyproject_section(pyproject_path):
                    return pyproject_path
            except ConfigError as e:
                logger.debug("Skipping unreadable %s: %s", pyproject_path, e)

        parent = current.parent
        if parent == current:
            break
        current = parent

    return None


def discover_config_file(start_dir: Optional[Path] = None) -> Optional[Path]:
    """Discover a configuration file in the parent chain, then the home directory."""
    found = find_config_in_parents(start_dir)
    if found:
        return found

    home = Path.home()
    for filename in CONFIG_FILENAMES:
        config_path = home / filename
        if config_path.is_file():
            return config_path

    return None


def load_config_file(config_path: Path | str) -> Dict[str, Any]:
    """Load raw settings from a TOML, YAML, JSON or pyproject.toml file.

    Parameters
    ----------
    config_path : Path or str
        Path to the configuration file

    Returns
    -------
    dict
        Settings found in the file

    Raises
    ------
    ConfigError
        If the file is missing, unreadable, malformed or of an unknown type

    """
    config_path = Path(config_path)
    source = str(config_path)
    if not config_path.is_file():
        raise ConfigError(f"Configuration file does not exist: {config_path}", source=source)

    ext = config_path.suffix.lower()
    if config_path.name.lower() == "pyproject.toml":
        return _load_pyproject_section(config_path)

    try:
        if ext == ".toml":
            with open(config_path, "rb") as f:
                data = tomllib.load(f)
        elif ext in (".yaml", ".yml"):
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        elif ext == ".json":
            with open(config_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        else:
            raise ConfigError(f"Unsupported config file format: {ext}. Use .toml, .yaml or .json", source=source)
    except (tomllib.TOMLDecodeError, yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigError(f"Invalid config file {config_path}: {e}", source=source, original_error=e) from e
    except OSError as e:
        raise ConfigError(f"Error reading config file {config_path}: {e}", source=source, original_error=e) from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config file must contain a mapping, got {type(data).__name__}", source=source)
    return data


def env_overrides(environ: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    """Collect ``CONVERTFLOW_<FIELD>`` variables for known configuration fields."""
    environ = os.environ if environ is None else environ
    overrides = {}
    for name in _FIELD_TYPES:
        value = environ.get(f"{ENV_PREFIX}{name.upper()}")
        if value is not None:
            overrides[name] = value
    return overrides


def load_config(
    config_path: Optional[Path | str] = None,
    environ: Optional[Mapping[str, str]] = None,
    discover: bool = True,
) -> ConvertFlowConfig:
    """Resolve the effective configuration.

    Parameters
    ----------
    config_path : Path or str, optional
        Explicit configuration file; takes precedence over ``CONVERTFLOW_CONFIG``
        and discovery
    environ : mapping, optional
        Environment to read overrides from, defaults to ``os.environ``
    discover : bool, default True
        Search for a configuration file when none is given

    Returns
    -------
    ConvertFlowConfig
        Defaults, overridden by the file, overridden by the environment

    Raises
    ------
    ConfigError
        If the file or an environment value is invalid

    """
    environ = os.environ if environ is None else environ
    path: Optional[Path | str] = config_path or environ.get(CONFIG_ENV_VAR)
    if path is None and discover:
        path = discover_config_file()

    settings: Dict[str, Any] = {}
    if path is not None:
        logger.debug("Loading configuration from %s", path)
        settings.update(ConvertFlowConfig.from_mapping(load_config_file(path), source=str(path)).__dict__)

    overrides = env_overrides(environ)
    if overrides:
        logger.debug("Applying environment overrides: %s", ", ".join(sorted(overrides)))
        for name, raw in overrides.items():
            settings[name] = _coerce(name, raw, f"{ENV_PREFIX}{name.upper()}")

    return ConvertFlowConfig(**settings)


DEFAULT_CONFIG = ConvertFlowConfig()

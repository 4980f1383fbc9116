"""
Configuration management for panelkit.

Settings are resolved in layers, later layers winning:

1. ``DEFAULT_CONFIG``
2. The project file, ``.panelkit/config.yaml`` (or ``PANELKIT_CONFIG``)
3. Environment overrides (``PANELKIT_UI_MODE``, ``PANELKIT_SUMMARY_CARD_WIDTH``)
4. CLI flags, applied by the command handlers

Example config file::

    ui:
      mode: auto
    summary:
      card_width: 3
    snapshot:
      strip_fields: [sql, source_definition]
"""

import copy
import os
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

import yaml


# =============================================================================
# Defaults
# =============================================================================

CONFIG_DIR = ".panelkit"
CONFIG_FILENAME = "config.yaml"
CONFIG_ENV_VAR = "PANELKIT_CONFIG"

DEFAULT_CONFIG = {
    "ui": {
        "mode": "plain",
    },
    "summary": {
        # Width hint of each benchmark summary card
        "card_width": 2,
    },
    "snapshot": {
        # Panel fields removed before a snapshot is shared
        "strip_fields": ["sql", "source_definition"],
    },
}

# (environment variable, config key, parser)
ENV_OVERRIDES: Tuple[Tuple[str, str, Callable[[str], Any]], ...] = (
    ("PANELKIT_UI_MODE", "ui.mode", str),
    ("PANELKIT_SUMMARY_CARD_WIDTH", "summary.card_width", int),
)


def default_config_path(project_root: Optional[Union[str, Path]] = None) -> Path:
    """Location of the project config file under ``project_root`` (default: cwd)."""
    root = Path(project_root) if project_root else Path.cwd()
    return root / CONFIG_DIR / CONFIG_FILENAME


# =============================================================================
# Configuration Class
# =============================================================================

class Config:
    """
    Resolved panelkit settings.

    Attributes:
        config_path: Config file that was (or would be) read.
        project_root: Directory holding ``.panelkit/``.

    Example:
        >>> config = Config(project_root="/tmp/project")
        >>> config.get("ui.mode")
        'plain'
        >>> config.get_summary_card_width()
        2
    """

    def __init__(
        self,
        config_path: Optional[Union[str, Path]] = None,
        project_root: Optional[Union[str, Path]] = None,
    ):
        """
        Args:
            config_path: Explicit config file. Falls back to ``PANELKIT_CONFIG``,
                then to ``.panelkit/config.yaml`` under the project root.
            project_root: Project directory. Defaults to the current directory.

        Raises:
            ValueError: If the file is not a mapping or an override is malformed.
        """
        self.project_root = Path(project_root) if project_root else Path.cwd()

        explicit = config_path or os.environ.get(CONFIG_ENV_VAR)
        self.config_path = Path(explicit) if explicit else default_config_path(self.project_root)

        settings = _deep_merge(DEFAULT_CONFIG, _read_config_file(self.config_path))
        for env_var, key, parse in ENV_OVERRIDES:
            raw = os.environ.get(env_var)
            if raw is None:
                continue
            try:
                _set_nested(settings, key, parse(raw))
            except ValueError:
                raise ValueError(f"{env_var} has an invalid value: {raw!r}") from None
        self._config = settings

    def get(self, key: str, default: Any = None) -> Any:
        """
        Look up a setting by dotted key.

        Example:
            >>> config.get("snapshot.strip_fields")
            ['sql', 'source_definition']
            >>> config.get("summary.missing", 0)
            0
        """
        return _get_nested(self._config, key, default)

    def get_summary_card_width(self) -> int:
        """
        Width hint given to every benchmark summary card.

        Raises:
            ValueError: If the configured width is not a positive integer.
        """
        width = self.get("summary.card_width", DEFAULT_CONFIG["summary"]["card_width"])
        if isinstance(width, bool) or not isinstance(width, int) or width < 1:
            raise ValueError(f"summary.card_width must be a positive integer, got {width!r}")
        return width

    def get_strip_fields(self) -> List[str]:
        """Panel fields removed from exported snapshots; a lone string counts as one field."""
        fields = self.get("snapshot.strip_fields", DEFAULT_CONFIG["snapshot"]["strip_fields"])
        if isinstance(fields, str):
            return [fields]
        return [str(name) for name in fields or []]

    def as_dict(self) -> Dict[str, Any]:
        return copy.deepcopy(self._config)

    def save(self, path: Optional[Union[str, Path]] = None) -> Path:
        """Write the resolved settings as YAML to ``path`` (default: config_path)."""
        return _write_config_file(Path(path) if path else self.config_path, self._config)

    def __repr__(self) -> str:
        return f"Config(config_path={self.config_path}, project_root={self.project_root})"


# =============================================================================
# Module-level convenience functions
# =============================================================================

_global_config: Optional[Config] = None


def get_config(
    config_path: Optional[Union[str, Path]] = None,
    project_root: Optional[Union[str, Path]] = None,
    reload: bool = False,
) -> Config:
    """
    Return the shared Config, building it on first use or when ``reload`` is set.
    """
    global _global_config

    if _global_config is None or reload:
        _global_config = Config(config_path=config_path, project_root=project_root)
    return _global_config


def init_config(
    project_root: Optional[Union[str, Path]] = None,
    overwrite: bool = False,
    **sections: Any,
) -> Path:
    """
    Write ``.panelkit/config.yaml`` with the defaults.

    Args:
        project_root: Project directory. Defaults to the current directory.
        overwrite: Replace an existing file.
        **sections: Top-level sections merged over the defaults,
            e.g. ``ui={"mode": "rich"}``.

    Returns:
        Path of the written file.

    Raises:
        FileExistsError: If the file exists and overwrite is False.
    """
    config_path = default_config_path(project_root)
    if config_path.exists() and not overwrite:
        raise FileExistsError(
            f"Config file already exists: {config_path}. Use overwrite=True to replace."
        )
    return _write_config_file(config_path, _deep_merge(DEFAULT_CONFIG, sections))


# =============================================================================
# Helper Functions
# =============================================================================

def _read_config_file(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    with open(path, "r") as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file must contain a mapping: {path}")
    return data


def _write_config_file(path: Path, data: Dict[str, Any]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False)
    return path


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """
    Merge ``override`` into a copy of ``base``; nested mappings merge key by key.

    Neither argument is modified.
    """
    merged = copy.deepcopy(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = _deep_merge(current, value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def _get_nested(d: Dict[str, Any], key: str, default: Any = None) -> Any:
    node: Any = d
    for part in key.split("."):
        if not isinstance(node, dict) or part not in node:
            return default
        node = node[part]
    return node


def _set_nested(d: Dict[str, Any], key: str, value: Any) -> None:
    *parents, leaf = key.split(".")
    for part in parents:
        d = d.setdefault(part, {})
    d[leaf] = value

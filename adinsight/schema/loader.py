"""Config loader - YAML serialization and deserialization for AnalysisConfig.

Lets column aliases, channel groups and view limits be reviewed,
version-controlled and edited as human-readable YAML files.
"""

from pathlib import Path

import yaml

from .columns import AnalysisConfig


def save_config(config: AnalysisConfig, path: str | Path) -> None:
    """Serialize an AnalysisConfig to a YAML file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = config.to_dict()
    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False,
                  allow_unicode=True, width=120)


def load_config(path: str | Path) -> AnalysisConfig:
    """Deserialize an AnalysisConfig from a YAML file."""
    path = Path(path)
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping, "
                         f"got {type(data).__name__}")
    return AnalysisConfig.from_dict(data)

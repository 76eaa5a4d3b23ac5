from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List

from proxy_source.config.model import GlobalConfig
from proxy_source.core.exceptions import ConfigError
from proxy_source.core.pagination import DEFAULT_LIMIT, PruneWindow
from proxy_source.core.source import SourceConfig

logger = logging.getLogger(__name__)


def parse_source_entry(raw: Dict[str, Any], *, default_name: str, paginate: bool, default_limit: int) -> SourceConfig:
    """
    Turn one raw source entry into a SourceConfig, applying the global defaults.

    :raises KeyError / ValueError / TypeError: on structurally invalid entries
    """
    entry = dict(raw)
    entry.setdefault("name", default_name)
    entry.setdefault("paginate", paginate)

    cfg = SourceConfig.from_dict(entry)
    if cfg.paginate and cfg.prune is None:
        cfg.prune = PruneWindow(start=0, limit=default_limit)
    return cfg


def load_global_config(root: Path) -> GlobalConfig:
    """
    Load configuration from a directory using the multi-file layout.

    Expected structure:

        root/
            global.json
            sources/
                users.json
                orders.json
                ...

    global.json keys:

    - default_limit: page size for paginating sources without a 'prune' window, defaults to 20
    - paginate: default 'paginate' for source entries, defaults to False

    Each file in 'sources/' is parsed into a SourceConfig named after the file stem
    unless it carries its own 'name'.

    :param root: Directory containing 'global.json' and optionally 'sources/'.
    :return: A GlobalConfig instance.
    :raises FileNotFoundError: if global.json does not exist.
    :raises ConfigError: if global.json or a source entry is invalid.
    """
    root = Path(root)
    logger.info(
        "Loading global config",
        extra={"config_root": str(root)},
    )

    global_path = root / "global.json"
    if not global_path.is_file():
        raise FileNotFoundError(f"File not found at {global_path}")

    raw_global = _read_json(global_path)

    try:
        default_limit = int(raw_global.get("default_limit", DEFAULT_LIMIT))
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{global_path}: invalid default_limit") from e
    if default_limit <= 0:
        raise ConfigError(f"{global_path}: default_limit must be > 0, got {default_limit}")
    paginate = bool(raw_global.get("paginate", False))

    sources: List[SourceConfig] = []
    sources_dir = root / "sources"
    if sources_dir.is_dir():
        for config_file in sorted(sources_dir.glob("*.json")):
            raw = _read_json(config_file)
            try:
                cfg = parse_source_entry(
                    raw,
                    default_name=config_file.stem,
                    paginate=paginate,
                    default_limit=default_limit,
                )
            except (KeyError, TypeError, ValueError) as e:
                logger.error(
                    "Invalid source config",
                    extra={"path": str(config_file), "error": str(e)},
                )
                raise ConfigError(f"{config_file}: invalid source entry ({e})") from e
            sources.append(cfg)

    names = [cfg.name for cfg in sources]
    duplicates = sorted({n for n in names if names.count(n) > 1})
    if duplicates:
        raise ConfigError(f"Duplicate source names in {sources_dir}: {', '.join(duplicates)}")

    logger.info(
        "Sources loaded from config root",
        extra={"config_root": str(root), "n_sources": len(sources), "source_names": names},
    )

    return GlobalConfig(
        default_limit=default_limit,
        paginate=paginate,
        sources=sources,
        config_root=root,
    )


def _read_json(path: Path) -> Dict[str, Any]:
    try:
        with path.open(encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"{path}: invalid JSON ({e})") from e
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: expected a JSON object")
    return data

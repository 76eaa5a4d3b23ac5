from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from proxy_source.core.pagination import DEFAULT_LIMIT
from proxy_source.core.source import SourceConfig


@dataclass
class GlobalConfig:
    """
    Parsed global.json plus every source entry found next to it.

    - default_limit: page size for paginating sources without an explicit prune window
    - paginate: default for source entries that do not say
    """
    default_limit: int = DEFAULT_LIMIT
    paginate: bool = False
    sources: List[SourceConfig] = field(default_factory=list)
    config_root: Optional[Path] = None

    def by_name(self) -> Dict[str, SourceConfig]:
        return {cfg.name: cfg for cfg in self.sources if cfg.name}

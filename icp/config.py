"""ICP Configuration — project-level .icprc.yml support.

Loads configuration from .icprc.yml (or .icprc.yaml, .icprc.json) in the
working directory or any parent. Allows projects to configure:
  - the prefix of generated temporaries
  - which operators the registry offers
  - fixed-point iteration limits
  - whether contractions are checked with Z3

Example .icprc.yml:
    symbol_prefix: tmp
    operators: ["+", "-", "*"]
    max_iterations: 100
    tolerance: 1.0e-12
    verify: true
    verify_timeout_ms: 2000
    format: text
"""

from __future__ import annotations

import os
import json
import logging
from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any

import yaml

from icp.registry import DEFAULT_REGISTRY, OperationRegistry
from icp.symbols import SymbolGenerator

logger = logging.getLogger(__name__)


@dataclass
class IcpConfig:
    """Project-level ICP configuration."""
    symbol_prefix: str = "t"
    # Operator symbols offered by the registry; empty = all
    operators: List[str] = field(default_factory=list)
    # Fixed-point driver
    max_iterations: int = 50
    tolerance: float = 1e-9
    # Z3 soundness check
    verify: bool = False
    verify_timeout_ms: int = 5000
    # Output: "json" or "text"
    format: str = "json"

    def registry(self) -> OperationRegistry:
        if not self.operators:
            return DEFAULT_REGISTRY
        return OperationRegistry.subset(self.operators)

    def symbols(self) -> SymbolGenerator:
        return SymbolGenerator(prefix=self.symbol_prefix)


# ---------------------------------------------------------------------------
# Config file names (in priority order)
# ---------------------------------------------------------------------------

_CONFIG_FILES = [
    ".icprc.yml",
    ".icprc.yaml",
    ".icprc.json",
    "icp.config.yml",
    "icp.config.json",
]


def find_config(start_dir: str = ".") -> Optional[str]:
    """Find the nearest config file by walking up from start_dir."""
    current = os.path.abspath(start_dir)
    while True:
        for name in _CONFIG_FILES:
            path = os.path.join(current, name)
            if os.path.isfile(path):
                return path
        parent = os.path.dirname(current)
        if parent == current:
            break
        current = parent
    return None


def load_config(path: Optional[str] = None, start_dir: str = ".") -> IcpConfig:
    """Load configuration from a file.

    If no path is given, searches for a config file starting from start_dir.
    If no config file is found, or it cannot be read or parsed, returns
    defaults.
    """
    if path is None:
        path = find_config(start_dir)

    if path is None:
        return IcpConfig()

    try:
        with open(path, "r") as f:
            content = f.read()
    except OSError as e:
        logger.warning("cannot read config %s: %s", path, e)
        return IcpConfig()

    try:
        if path.endswith(".json"):
            data = json.loads(content)
        else:
            data = yaml.safe_load(content)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        logger.warning("cannot parse config %s: %s", path, e)
        return IcpConfig()

    if not isinstance(data, dict):
        return IcpConfig()
    logger.debug("loaded config from %s", path)
    return _dict_to_config(data)


def _dict_to_config(data: Dict[str, Any]) -> IcpConfig:
    """Convert a parsed dict to IcpConfig."""
    config = IcpConfig()

    if "symbol_prefix" in data:
        config.symbol_prefix = str(data["symbol_prefix"])
    if "operators" in data and isinstance(data["operators"], list):
        config.operators = [str(op) for op in data["operators"]]
    if "max_iterations" in data:
        config.max_iterations = int(data["max_iterations"])
    if "tolerance" in data:
        config.tolerance = float(data["tolerance"])
    if "verify" in data:
        config.verify = bool(data["verify"])
    if "verify_timeout_ms" in data:
        config.verify_timeout_ms = int(data["verify_timeout_ms"])
    if "format" in data:
        config.format = str(data["format"])

    return config

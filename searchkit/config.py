# searchkit/config.py
from dataclasses import dataclass, field
from typing import List
import logging
import os
import tomllib  # python >=3.11

logger = logging.getLogger(__name__)

# Center squares weighted higher, edges zero.
POSITION_TABLE = [
    [0, 0, 0, 0, 0, 0, 0, 0],
    [0, 1, 1, 1, 1, 1, 1, 0],
    [0, 1, 2, 2, 2, 2, 1, 0],
    [0, 1, 2, 3, 3, 2, 1, 0],
    [0, 1, 2, 3, 3, 2, 1, 0],
    [0, 1, 2, 2, 2, 2, 1, 0],
    [0, 1, 1, 1, 1, 1, 1, 0],
    [0, 0, 0, 0, 0, 0, 0, 0],
]

@dataclass
class SearchConfig:
    depth: int = 4
    max_depth: int = 8  # upper bound accepted from API callers
    use_alpha_beta: bool = True

@dataclass
class EvalConfig:
    man_value: int = 10
    king_value: int = 15
    use_positional: bool = True
    position_table: List[List[int]] = field(default_factory=lambda: [row[:] for row in POSITION_TABLE])
    king_edge_bonus: int = 2
    mobility_weight: float = 0.5

@dataclass
class GameConfig:
    draw_move_limit: int = 100

@dataclass
class ApiConfig:
    title: str = "searchkit"
    default_heuristic: float = float("inf")  # nodes missing from the heuristic table
    default_edge_cost: float = 1.0  # edges missing from the cost table

@dataclass
class Config:
    search: SearchConfig = field(default_factory=SearchConfig)
    eval: EvalConfig = field(default_factory=EvalConfig)
    game: GameConfig = field(default_factory=GameConfig)
    api: ApiConfig = field(default_factory=ApiConfig)
    log_level: str = "INFO"

    @staticmethod
    def load_from_toml(path: str = "searchkit.toml") -> "Config":
        cfg = Config()
        if not os.path.exists(path):
            return cfg
        with open(path, "rb") as f:
            raw = tomllib.load(f)
        for section in ("search", "eval", "game", "api"):
            target = getattr(cfg, section)
            for k, v in raw.get(section, {}).items():
                if hasattr(target, k):
                    setattr(target, k, v)
                else:
                    logger.warning("ignoring unknown config key %s.%s", section, k)
        if "log_level" in raw:
            cfg.log_level = str(raw["log_level"])
        return cfg

# single globally importable config instance
CONFIG = Config.load_from_toml(os.environ.get("SEARCHKIT_CONFIG_TOML", "searchkit.toml"))
# allow env override of depth for quick debugging
override_depth = os.environ.get("SEARCHKIT_SEARCH_DEPTH")
if override_depth:
    try:
        CONFIG.search.depth = int(override_depth)
    except ValueError:
        logger.warning("SEARCHKIT_SEARCH_DEPTH=%r is not an integer", override_depth)

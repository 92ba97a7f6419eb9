from .config import ScoringConfig, SessionConfig, load_config
from .connectivity import (
    CornerClosure,
    compute_blocked_mask,
    detect_containment,
    evaluate_containment,
    reachable_from_boundary,
)
from .flood import FloodResult, evaluate_flood, run_simulation
from .grid import Category, ConfigurationError, Grid, ProtectedPoint, Terrain, load_level
from .session import LeveeSession, SessionState

__all__ = [
    "ScoringConfig",
    "SessionConfig",
    "load_config",
    "CornerClosure",
    "compute_blocked_mask",
    "detect_containment",
    "evaluate_containment",
    "reachable_from_boundary",
    "FloodResult",
    "evaluate_flood",
    "run_simulation",
    "Category",
    "ConfigurationError",
    "Grid",
    "ProtectedPoint",
    "Terrain",
    "load_level",
    "LeveeSession",
    "SessionState",
]

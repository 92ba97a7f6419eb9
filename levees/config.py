from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

import yaml


RESIDENCE_BONUS = 3
CRITICAL_FACILITY_BONUS = 10
HAZARD_PENALTY = 5
HAZARD_ADJACENT_RESIDENCE_PENALTY = 1

DEFAULT_WALL_BUDGET = 16
DEFAULT_MAX_HISTORY = 10


@dataclass
class ScoringConfig:
    residence_bonus: int = RESIDENCE_BONUS
    critical_facility_bonus: int = CRITICAL_FACILITY_BONUS
    hazard_penalty: int = HAZARD_PENALTY
    hazard_adjacent_residence_penalty: int = HAZARD_ADJACENT_RESIDENCE_PENALTY


@dataclass
class SessionConfig:
    wall_budget: int = DEFAULT_WALL_BUDGET
    max_history: int = DEFAULT_MAX_HISTORY
    label: str = ""


def load_config(cfg_path: str | None) -> Tuple[SessionConfig, ScoringConfig]:
    if cfg_path is None:
        return SessionConfig(), ScoringConfig()
    with open(cfg_path, "r") as f:
        data = yaml.safe_load(f) or {}
    session_d = data.get("session", {}) or {}
    scoring_d = data.get("scoring", {}) or {}
    base_session = SessionConfig()
    base_scoring = ScoringConfig()
    session_cfg = SessionConfig(
        wall_budget=int(session_d.get("wall_budget", base_session.wall_budget)),
        max_history=int(session_d.get("max_history", base_session.max_history)),
        label=str(session_d.get("label", base_session.label)),
    )
    scoring_cfg = ScoringConfig(
        residence_bonus=int(scoring_d.get("residence_bonus", base_scoring.residence_bonus)),
        critical_facility_bonus=int(
            scoring_d.get("critical_facility_bonus", base_scoring.critical_facility_bonus)
        ),
        hazard_penalty=int(scoring_d.get("hazard_penalty", base_scoring.hazard_penalty)),
        hazard_adjacent_residence_penalty=int(
            scoring_d.get(
                "hazard_adjacent_residence_penalty",
                base_scoring.hazard_adjacent_residence_penalty,
            )
        ),
    )
    return session_cfg, scoring_cfg

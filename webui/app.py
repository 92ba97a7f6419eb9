from __future__ import annotations

import logging
import os
from dataclasses import asdict
from pathlib import Path

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from levees.config import load_config
from levees.grid import load_level
from levees.session import LeveeSession


class BarrierRequest(BaseModel):
    x: int
    y: int


class ShareCodeRequest(BaseModel):
    code: str


def _default_level() -> Path:
    env_path = os.environ.get("LEVEES_LEVEL")
    if env_path:
        return Path(env_path)
    return Path("levels/default.yaml")


app = FastAPI()


@app.on_event("startup")
def _load_session() -> None:
    logging.basicConfig(level=logging.INFO, format='[%(asctime)s] %(message)s', datefmt='%H:%M:%S')
    level_path = _default_level()
    if not level_path.exists():
        raise RuntimeError(f"Level file not found: {level_path}. Set LEVEES_LEVEL env var.")
    session_cfg, scoring_cfg = load_config(os.environ.get("LEVEES_CONFIG"))
    grid, meta = load_level(str(level_path))
    session_cfg.label = meta.get("label") or session_cfg.label
    session_cfg.wall_budget = meta.get("wall_budget", session_cfg.wall_budget)
    app.state.session = LeveeSession(grid, session_cfg, scoring_cfg)
    logging.getLogger("webui").info("Loaded level %s (%r)", session_cfg.label, grid)


def _get_session() -> LeveeSession:
    session = getattr(app.state, "session", None)
    if session is None:
        raise HTTPException(status_code=503, detail="Session not ready")
    return session


@app.get("/api/state")
def get_state() -> dict:
    return asdict(_get_session().current_state())


@app.post("/api/barrier")
def toggle_barrier(req: BarrierRequest) -> dict:
    try:
        state = _get_session().toggle_barrier(req.x, req.y)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return asdict(state)


@app.post("/api/undo")
def undo() -> dict:
    return asdict(_get_session().undo())


@app.post("/api/restart")
def restart() -> dict:
    return asdict(_get_session().restart())


@app.post("/api/share-code")
def apply_share_code(req: ShareCodeRequest) -> dict:
    return asdict(_get_session().apply_share_code(req.code))

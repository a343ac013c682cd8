from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from apps.api.analysis import list_movements, run_frame_analysis, run_session_analysis
from lift_modules import config

logging.getLogger("lift_modules").setLevel(config.LOG_LEVEL)

app = FastAPI(
    title="Lift Form API",
    version="0.1.0",
    description="Backend API for per-frame and per-session lift form analysis.",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class PosePayload(BaseModel):
    keypoints: dict[str, Any] = Field(default_factory=dict)
    timestamp: float = 0.0


class FrameAnalysisRequest(BaseModel):
    movement: str
    pose: Optional[PosePayload] = None


class SessionAnalysisRequest(BaseModel):
    movement: str
    frames: list[Optional[PosePayload]] = Field(default_factory=list)
    fps: float = Field(default=config.DEFAULT_FPS)
    smooth: bool = True


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.get("/movements")
def movements() -> dict:
    return {"movements": list_movements()}


@app.post("/analysis/frame")
def analyze_frame(payload: FrameAnalysisRequest) -> dict:
    try:
        pose = payload.pose.model_dump() if payload.pose is not None else None
        return run_frame_analysis(payload.movement, pose)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e


@app.post("/analysis/session")
def analyze_session_route(payload: SessionAnalysisRequest) -> dict:
    try:
        frames = [f.model_dump() if f is not None else None for f in payload.frames]
        return run_session_analysis(
            movement=payload.movement,
            frames=frames,
            fps=payload.fps,
            smooth=payload.smooth,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8080)

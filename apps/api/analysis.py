from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Optional

from lift_modules import (
    OPTIONAL_LANDMARKS,
    REQUIRED_LANDMARKS,
    PoseFrame,
    analyze,
    analyze_session,
    canonicalize_movement,
    get_camera_guidance,
    supported_movements,
)
from lift_modules import config

logger = logging.getLogger(__name__)


# --------------------
# movement id normalization
# --------------------
_MOVEMENT_ALIASES = {
    "squat": "squat",
    "squats": "squat",
    "backsquat": "squat",
    "bench": "bench",
    "benchpress": "bench",
    "deadlift": "deadlift",
    "deadlifts": "deadlift",
}


def normalize_movement_id(value: Any) -> Any:
    """
    클라이언트가 보낸 운동 이름을 엔진 id로 바꾼다.
    대소문자, 공백, '-', '_' 는 무시한다 ("Bench Press" → "bench").
    모르는 이름은 그대로 돌려주고 판정은 엔진에 맡긴다.
    """
    if not isinstance(value, str):
        return value
    key = value.strip().lower().replace("-", "").replace("_", "").replace(" ", "")
    return _MOVEMENT_ALIASES.get(key, value)


# --------------------
# movement catalogue
# --------------------
def list_movements() -> list[dict]:
    return [
        {
            "id": m.value,
            "required_landmarks": list(REQUIRED_LANDMARKS[m]),
            "optional_landmarks": list(OPTIONAL_LANDMARKS[m]),
            "guidance": get_camera_guidance(m),
        }
        for m in supported_movements()
    ]


# --------------------
# frame analysis
# --------------------
def run_frame_analysis(movement: str, pose: Optional[Mapping[str, Any]]) -> dict:
    """
    단일 프레임 분석. 지원하지 않는 운동이면 ValueError (API에서 400).
    """
    resolved = canonicalize_movement(normalize_movement_id(movement))
    frame = PoseFrame.from_dict(pose) if pose is not None else None
    return analyze(resolved, frame).to_dict()


# --------------------
# session analysis
# --------------------
def run_session_analysis(
    movement: str,
    frames: Iterable[Optional[Mapping[str, Any]]],
    fps: float = config.DEFAULT_FPS,
    smooth: bool = True,
) -> dict:
    if fps < config.MIN_FPS or fps > config.MAX_FPS:
        raise ValueError(f"fps는 {config.MIN_FPS}~{config.MAX_FPS} 사이여야 합니다.")

    resolved = canonicalize_movement(normalize_movement_id(movement))
    poses = [PoseFrame.from_dict(f) if f is not None else None for f in frames]
    summary = analyze_session(resolved, poses, fps=fps, smooth=smooth)
    logger.info(
        f"세션 분석 완료: {resolved.value} frames={summary['frame_count']} reps={summary['rep_count']}"
    )
    return summary

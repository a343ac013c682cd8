"""
운동 종류 → 평가기 디스패처

analyze(movement, pose)가 엔진의 단일 진입점이다.
알 수 없는 운동 id는 unsupported_movement 태그 결과로 구분해서 돌려준다.
"""
import logging
from typing import Any, Dict, List, Mapping, Optional, Union

from lift_modules.pose_types import FeedbackStatus, FormFeedback, Movement, PoseFrame
from lift_modules.posture_evaluator import (
    BenchPressEvaluator,
    DeadliftEvaluator,
    MovementEvaluator,
    SquatEvaluator,
)

logger = logging.getLogger(__name__)

DEFAULT_GUIDANCE = MovementEvaluator.CAMERA_GUIDANCE

_EVALUATORS: Dict[Movement, MovementEvaluator] = {
    Movement.SQUAT: SquatEvaluator(),
    Movement.BENCH: BenchPressEvaluator(),
    Movement.DEADLIFT: DeadliftEvaluator(),
}


def canonicalize_movement(value: Union[str, Movement, None]) -> Movement:
    """
    운동 id를 Movement로 변환한다.

    Movement 멤버 또는 정확한 값 문자열('squat', 'bench', 'deadlift')만 허용한다.
    별칭 처리는 API 계층(apps/api/analysis.py)에서 한다.

    Raises:
        ValueError: 지원하지 않는 운동 id (문자열이 아닌 값 포함)
    """
    if isinstance(value, Movement):
        return value
    if not isinstance(value, str):
        raise ValueError(f"운동 id는 문자열이어야 합니다: {value!r}")
    try:
        return Movement(value)
    except ValueError:
        raise ValueError(
            f"지원하지 않는 운동입니다: {value!r}. 지원 운동: {[m.value for m in Movement]}"
        ) from None


def supported_movements() -> List[Movement]:
    return list(Movement)


def get_evaluator(movement: Union[str, Movement]) -> MovementEvaluator:
    return _EVALUATORS[canonicalize_movement(movement)]


def get_camera_guidance(movement: Union[str, Movement, None]) -> str:
    """운동별 카메라 위치 안내 문구."""
    try:
        return get_evaluator(movement).CAMERA_GUIDANCE
    except ValueError:
        return DEFAULT_GUIDANCE


def _coerce_pose(pose: Union[PoseFrame, Mapping[str, Any], None]) -> Optional[PoseFrame]:
    if pose is None:
        return None
    if isinstance(pose, PoseFrame):
        return pose
    return PoseFrame.from_dict(pose)


def analyze(
    movement: Union[str, Movement, None],
    pose: Union[PoseFrame, Mapping[str, Any], None],
    evaluator: Optional[MovementEvaluator] = None,
) -> FormFeedback:
    """
    포즈 한 프레임을 운동별 평가기로 평가한다.

    Args:
        movement: 'squat' | 'bench' | 'deadlift' (또는 Movement)
        pose: PoseFrame 또는 {"keypoints": {...}, "timestamp": ...} dict
        evaluator: 기본 평가기 대신 사용할 평가기 (예: rep_decider를 주입한 벤치 평가기)

    Returns:
        FormFeedback. 실패 종류는 status로 구분한다.

    Raises:
        ValueError: dict로 받은 pose의 좌표가 숫자가 아닐 때 (PoseFrame 입력은 예외 없음)
    """
    try:
        resolved = canonicalize_movement(movement)
    except ValueError:
        logger.warning(f"지원하지 않는 운동 id: {movement!r}")
        return FormFeedback(status=FeedbackStatus.UNSUPPORTED_MOVEMENT)

    frame = _coerce_pose(pose)
    if frame is None or not frame.keypoints:
        return FormFeedback(status=FeedbackStatus.NO_POSE, movement=resolved)

    return (evaluator or _EVALUATORS[resolved]).evaluate(frame)

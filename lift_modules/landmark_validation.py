"""
운동별 필수 랜드마크 검증

평가기가 기하 계산을 시작하기 전에 필수 키가 모두 있는지 확인한다.
visibility 값은 검사하지 않는다 (키 존재 여부만 확인).
"""
import logging
from typing import Dict, List, Sequence

from lift_modules.pose_types import FeedbackStatus, FormFeedback, Movement, PoseFrame

logger = logging.getLogger(__name__)

INCOMPLETE_POSE_ERROR = "Incomplete pose detection"

REQUIRED_LANDMARKS: Dict[Movement, tuple] = {
    Movement.SQUAT: ("leftHip", "rightHip", "leftKnee", "rightKnee", "leftAnkle", "rightAnkle"),
    Movement.BENCH: ("leftShoulder", "rightShoulder", "leftElbow", "rightElbow", "leftWrist", "rightWrist"),
    Movement.DEADLIFT: ("leftShoulder", "rightShoulder", "leftHip", "rightHip", "leftKnee", "rightKnee"),
}

# 있으면 추가 체크가 활성화되는 랜드마크
OPTIONAL_LANDMARKS: Dict[Movement, tuple] = {
    Movement.SQUAT: ("leftShoulder", "rightShoulder"),
    Movement.BENCH: (),
    Movement.DEADLIFT: ("leftAnkle", "rightAnkle"),
}

INCOMPLETE_POSE_MESSAGES: Dict[Movement, str] = {
    Movement.SQUAT: "Position yourself so your full body is visible",
    Movement.BENCH: "Position camera to show your upper body clearly",
    Movement.DEADLIFT: "Position yourself so your full body is visible from the side",
}


def missing_landmarks(pose: PoseFrame, required: Sequence[str]) -> List[str]:
    """required 중 pose에 없는 키 목록 (required 순서 유지)."""
    return [name for name in required if not pose.has(name)]


def has_all(pose: PoseFrame, names: Sequence[str]) -> bool:
    return not missing_landmarks(pose, names)


def validate_landmarks(pose: PoseFrame, movement: Movement) -> dict:
    """
    운동별 필수 랜드마크 검증.

    Returns:
        {"is_valid": bool, "missing_landmarks": [str, ...]}
    """
    missing = missing_landmarks(pose, REQUIRED_LANDMARKS[movement])
    return {"is_valid": not missing, "missing_landmarks": missing}


def incomplete_pose_feedback(movement: Movement, missing: Sequence[str] = ()) -> FormFeedback:
    """필수 랜드마크 누락 시의 0점 결과 (피드백 1개, 에러 1개, details 없음)."""
    if missing:
        logger.warning(f"{movement.value}: 필수 랜드마크 누락 {list(missing)}")
    return FormFeedback(
        score=0.0,
        feedback=[INCOMPLETE_POSE_MESSAGES[movement]],
        errors=[INCOMPLETE_POSE_ERROR],
        details={},
        status=FeedbackStatus.INCOMPLETE_POSE,
        movement=movement,
    )

"""
lift_modules 패키지 - 규칙 기반 웨이트 리프팅 자세 분석

angle_utils:          각도/거리 계산
pose_types:           Landmark / PoseFrame / FormFeedback
landmark_validation:  운동별 필수 랜드마크 검증
posture_evaluator:    스쿼트/벤치프레스/데드리프트 평가기
form_analyzer:        운동 id → 평가기 디스패치
phase_detector:       phase 감지 (시간축)
exercise_counter:     반복 카운터
coord_filter:         랜드마크 스무딩
session:              세션 분석 및 요약
"""
from lift_modules.angle_utils import cal_angle, cal_distance
from lift_modules.pose_types import FeedbackStatus, FormFeedback, Landmark, Movement, PoseFrame
from lift_modules.landmark_validation import (
    OPTIONAL_LANDMARKS,
    REQUIRED_LANDMARKS,
    validate_landmarks,
)
from lift_modules.posture_evaluator import (
    BenchPressEvaluator,
    DeadliftEvaluator,
    SquatEvaluator,
)
from lift_modules.form_analyzer import (
    analyze,
    canonicalize_movement,
    get_camera_guidance,
    get_evaluator,
    supported_movements,
)
from lift_modules.phase_detector import create_phase_detector, extract_phase_metric
from lift_modules.exercise_counter import RepCounter
from lift_modules.coord_filter import KeypointSmoother
from lift_modules.session import SessionAnalyzer, analyze_session

__all__ = [
    'cal_angle',
    'cal_distance',
    'FeedbackStatus',
    'FormFeedback',
    'Landmark',
    'Movement',
    'PoseFrame',
    'OPTIONAL_LANDMARKS',
    'REQUIRED_LANDMARKS',
    'validate_landmarks',
    'SquatEvaluator',
    'BenchPressEvaluator',
    'DeadliftEvaluator',
    'analyze',
    'canonicalize_movement',
    'get_camera_guidance',
    'get_evaluator',
    'supported_movements',
    'create_phase_detector',
    'extract_phase_metric',
    'RepCounter',
    'KeypointSmoother',
    'SessionAnalyzer',
    'analyze_session',
]

"""
운동 Phase 감지기

관절 각도(phase 지표) 시계열에 히스테리시스 임계값과 속도 조건을 적용해
ready → top → descending → bottom → ascending → top 순환을 감지한다.

  - 스쿼트:     무릎 각도 (엉덩이-무릎-발목)
  - 벤치프레스: 팔꿈치 각도 (어깨-팔꿈치-손목)
  - 데드리프트: 엉덩이 각도 (어깨-엉덩이-무릎)

세 지표 모두 값이 클수록 신전(top)이다.
"""
from collections import deque
from typing import Optional, Union
import logging

from lift_modules.angle_utils import cal_angle
from lift_modules.pose_types import Movement, PoseFrame

logger = logging.getLogger(__name__)


class PhaseDetector:
    """운동 Phase 감지 부모 클래스 (자식은 임계값만 정의)"""

    MOVEMENT: Movement
    TOP_ENTER = 160.0     # top 진입 (신전)
    TOP_EXIT = 150.0      # top 탈출
    BOTTOM_ENTER = 100.0  # bottom 진입 (굴곡)
    BOTTOM_EXIT = 110.0   # bottom 탈출
    VEL_THRESHOLD = 1.0   # 속도 임계값 (도/프레임)
    MIN_FRAMES = 1        # 최소 체류 프레임

    def __init__(self):
        self.phase = 'ready'
        self.velocity_history = deque(maxlen=3)
        self.prev_angle = None
        self.frames_in_phase = 0
        logger.info(f"{type(self).__name__} 초기화 ({self.MOVEMENT.value})")

    def get_stable_velocity(self) -> float:
        """최근 속도들의 평균을 반환하여 노이즈 제거"""
        if len(self.velocity_history) < 2:
            return 0.0
        return sum(self.velocity_history) / len(self.velocity_history)

    def reset(self):
        """Phase 감지기 초기화"""
        self.phase = 'ready'
        self.velocity_history.clear()
        self.prev_angle = None
        self.frames_in_phase = 0

    def update(self, angle: float) -> str:
        """phase 지표(도)로 현재 phase를 판별한다."""
        self.frames_in_phase += 1

        if self.prev_angle is not None:
            self.velocity_history.append(angle - self.prev_angle)

        self.prev_angle = angle
        avg_velocity = self.get_stable_velocity()
        prev_phase = self.phase

        if self.phase == 'ready':
            if angle > self.TOP_ENTER:
                self.phase = 'top'

        elif self.phase == 'top':
            if (angle < self.TOP_EXIT
                    and avg_velocity < -self.VEL_THRESHOLD
                    and self.frames_in_phase >= self.MIN_FRAMES):
                self.phase = 'descending'

        elif self.phase == 'descending':
            if angle < self.BOTTOM_ENTER:
                self.phase = 'bottom'
            elif avg_velocity > self.VEL_THRESHOLD:
                self.phase = 'ascending'

        elif self.phase == 'bottom':
            if (angle > self.BOTTOM_EXIT
                    and avg_velocity > self.VEL_THRESHOLD
                    and self.frames_in_phase >= self.MIN_FRAMES):
                self.phase = 'ascending'

        elif self.phase == 'ascending':
            if angle > self.TOP_ENTER:
                self.phase = 'top'
            elif avg_velocity < -self.VEL_THRESHOLD:
                self.phase = 'descending'

        if prev_phase != self.phase:
            logger.debug(
                f"{self.MOVEMENT.value} Phase: {prev_phase} → {self.phase} "
                f"(angle={angle:.1f}°, vel={avg_velocity:.1f}°/f)"
            )
            self.frames_in_phase = 0

        return self.phase


class SquatPhaseDetector(PhaseDetector):
    """스쿼트 Phase 감지기 (무릎 각도 기반)"""
    MOVEMENT = Movement.SQUAT
    TOP_ENTER = 160.0
    TOP_EXIT = 150.0
    BOTTOM_ENTER = 100.0
    BOTTOM_EXIT = 110.0


class BenchPhaseDetector(PhaseDetector):
    """벤치프레스 Phase 감지기 (팔꿈치 각도 기반)"""
    MOVEMENT = Movement.BENCH
    TOP_ENTER = 150.0
    TOP_EXIT = 140.0
    BOTTOM_ENTER = 95.0
    BOTTOM_EXIT = 105.0
    VEL_THRESHOLD = 0.8


class DeadliftPhaseDetector(PhaseDetector):
    """데드리프트 Phase 감지기 (엉덩이 각도 기반)"""
    MOVEMENT = Movement.DEADLIFT
    TOP_ENTER = 165.0
    TOP_EXIT = 155.0
    BOTTOM_ENTER = 120.0
    BOTTOM_EXIT = 130.0


_DETECTORS = {
    Movement.SQUAT: SquatPhaseDetector,
    Movement.BENCH: BenchPhaseDetector,
    Movement.DEADLIFT: DeadliftPhaseDetector,
}


def create_phase_detector(movement: Union[str, Movement]) -> PhaseDetector:
    return _DETECTORS[Movement(movement)]()


def _mean_angle(pose: PoseFrame, a: str, b: str, c: str) -> float:
    left = cal_angle(pose[f"left{a}"], pose[f"left{b}"], pose[f"left{c}"])
    right = cal_angle(pose[f"right{a}"], pose[f"right{b}"], pose[f"right{c}"])
    return (left + right) / 2


def extract_phase_metric(pose: Optional[PoseFrame], movement: Union[str, Movement]) -> Optional[float]:
    """운동별 phase 지표(도) 추출. 랜드마크가 부족하면 None."""
    if pose is None:
        return None

    try:
        movement = Movement(movement)
        if movement is Movement.SQUAT:
            return _mean_angle(pose, "Hip", "Knee", "Ankle")
        if movement is Movement.BENCH:
            return _mean_angle(pose, "Shoulder", "Elbow", "Wrist")
        return _mean_angle(pose, "Shoulder", "Hip", "Knee")

    except (KeyError, TypeError, ValueError) as e:
        logger.warning(f"Phase 지표 추출 실패: {e}")
        return None

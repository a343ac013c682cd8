"""
규칙 기반 자세 평가기 - 스쿼트 / 벤치프레스 / 데드리프트

정규화 랜드마크(PoseFrame) 한 프레임을 받아 기하 지표를 계산하고
단계별 임계값 규칙으로 감점, 피드백, 에러를 누적한다.

공통 흐름:
  1. 필수 랜드마크 검증 (실패 시 0점 결과로 즉시 반환)
  2. 운동별 지표 계산 + 규칙 적용 (고정된 순서)
  3. 단일 프레임 반복 완료 판정

평가기는 상태를 갖지 않으므로 여러 스레드에서 공유해도 안전하다.
"""
import logging
from typing import Callable, Dict, List, Optional

from lift_modules.angle_utils import (
    cal_angle,
    cal_distance,
    horizontal_offset,
    inclination_deg,
    midpoint,
    safe_ratio,
)
from lift_modules.landmark_validation import (
    OPTIONAL_LANDMARKS,
    REQUIRED_LANDMARKS,
    has_all,
    incomplete_pose_feedback,
    validate_landmarks,
)
from lift_modules.pose_types import FeedbackStatus, FormFeedback, Movement, PoseFrame

logger = logging.getLogger(__name__)

RepDecider = Callable[[PoseFrame, Dict[str, float]], Optional[bool]]


class ScoreSheet:
    """100점에서 시작하는 감점표. feedback/errors는 규칙 적용 순서대로 쌓인다."""

    def __init__(self, start: float = 100.0):
        self.score = start
        self.feedback: List[str] = []
        self.errors: List[str] = []

    def error(self, message: str, penalty: float):
        self.errors.append(message)
        self.score -= penalty

    def warn(self, message: str, penalty: float):
        self.feedback.append(message)
        self.score -= penalty

    def good(self, message: str):
        self.feedback.append(message)


class MovementEvaluator:
    """
    운동별 평가기 부모 클래스.

    자식 클래스는 MOVEMENT와 _evaluate_metrics()를 정의한다.
    필수/선택 랜드마크는 landmark_validation 모듈의 표를 따른다.
    """

    MOVEMENT: Movement
    CAMERA_GUIDANCE = "Position camera to capture your full movement range."

    @property
    def required_landmarks(self) -> tuple:
        return REQUIRED_LANDMARKS[self.MOVEMENT]

    @property
    def optional_landmarks(self) -> tuple:
        return OPTIONAL_LANDMARKS[self.MOVEMENT]

    def evaluate(self, pose: PoseFrame) -> FormFeedback:
        """
        한 프레임을 평가한다.

        Args:
            pose: 정규화 랜드마크 프레임

        Returns:
            FormFeedback (score는 0~100으로 clamp)
        """
        validation = validate_landmarks(pose, self.MOVEMENT)
        if not validation["is_valid"]:
            return incomplete_pose_feedback(self.MOVEMENT, validation["missing_landmarks"])

        sheet = ScoreSheet()
        details = self._evaluate_metrics(pose, sheet)
        rep_completed = self._detect_rep(pose, details)

        logger.debug(f"{self.MOVEMENT.value} score={sheet.score:.1f} details={details}")
        return FormFeedback(
            score=sheet.score,
            feedback=sheet.feedback,
            errors=sheet.errors,
            rep_completed=rep_completed,
            details=details,
            status=FeedbackStatus.OK,
            movement=self.MOVEMENT,
        )

    def _evaluate_metrics(self, pose: PoseFrame, sheet: ScoreSheet) -> Dict[str, float]:
        raise NotImplementedError

    def _detect_rep(self, pose: PoseFrame, details: Dict[str, float]) -> Optional[bool]:
        raise NotImplementedError

    # ── 공통 헬퍼 ─────────────────────────────────────
    @staticmethod
    def _center(pose: PoseFrame, part: str) -> List[float]:
        """좌우 랜드마크 중점. part는 'Hip', 'Knee' 처럼 접미사."""
        return midpoint(pose[f"left{part}"], pose[f"right{part}"])

    @staticmethod
    def _asymmetry(left: float, right: float) -> float:
        """|L - R| / max(L, R). 좌우를 바꿔도 값이 같다."""
        return safe_ratio(abs(left - right), max(left, right))


# ─── 스쿼트 평가 ───────────────────────────────────────────

class SquatEvaluator(MovementEvaluator):
    """
    스쿼트 자세 평가기

    체크 항목 (순서 고정):
      1. 깊이:      (무릎 y - 엉덩이 y) / (발목 y - 엉덩이 y)
      2. 무릎 모임: 무릎 간격 / 엉덩이 간격
      3. 전방 기울기: 어깨 중점 x - 엉덩이 중점 x (어깨가 있을 때만)
      4. 좌우 대칭: 엉덩이-무릎 길이 비대칭
    """

    MOVEMENT = Movement.SQUAT
    CAMERA_GUIDANCE = "Position camera to show full body from the side. Ensure you can see from head to feet."

    DEPTH_ERROR = 0.1
    DEPTH_WARN = 0.3
    VALGUS_ERROR = 0.7
    VALGUS_WARN = 0.85
    LEAN_ERROR = 0.1
    LEAN_WARN = 0.05
    SYMMETRY_ERROR = 0.15
    REP_DEPTH = 0.2

    def _evaluate_metrics(self, pose, sheet):
        hip_y = (pose["leftHip"].y + pose["rightHip"].y) / 2
        knee_y = (pose["leftKnee"].y + pose["rightKnee"].y) / 2
        ankle_y = (pose["leftAnkle"].y + pose["rightAnkle"].y) / 2

        # 1. 깊이
        depth = safe_ratio(knee_y - hip_y, ankle_y - hip_y)
        if depth < self.DEPTH_ERROR:
            sheet.error("Squat deeper - hips need to go below knee level", 25)
        elif depth < self.DEPTH_WARN:
            sheet.warn("Good depth! Try to go slightly deeper", 5)
        else:
            sheet.good("Excellent depth!")

        # 2. 무릎 모임 (valgus)
        knee_width = horizontal_offset(pose["rightKnee"], pose["leftKnee"])
        hip_width = horizontal_offset(pose["rightHip"], pose["leftHip"])
        knee_tracking = safe_ratio(knee_width, hip_width)
        if knee_tracking < self.VALGUS_ERROR:
            sheet.error("Knees caving in - push knees out over toes", 30)
        elif knee_tracking < self.VALGUS_WARN:
            sheet.warn("Watch knee alignment - keep them tracking over toes", 10)
        else:
            sheet.good("Great knee tracking!")

        # 3. 전방 기울기 (어깨 없으면 생략)
        forward_lean = 0.0
        if has_all(pose, self.optional_landmarks):
            forward_lean = horizontal_offset(self._center(pose, "Shoulder"), self._center(pose, "Hip"))
            if forward_lean > self.LEAN_ERROR:
                sheet.error("Too much forward lean - keep chest up", 20)
            elif forward_lean > self.LEAN_WARN:
                sheet.warn("Slight forward lean - focus on keeping chest up", 5)
            else:
                sheet.good("Good upright posture!")

        # 4. 좌우 대칭
        left_leg = cal_distance(pose["leftHip"], pose["leftKnee"])
        right_leg = cal_distance(pose["rightHip"], pose["rightKnee"])
        symmetry = self._asymmetry(left_leg, right_leg)
        if symmetry > self.SYMMETRY_ERROR:
            sheet.error("Uneven squat - check your stance and balance", 15)

        return {
            "depth": depth,
            "kneeTracking": knee_tracking,
            "forwardLean": forward_lean,
            "symmetry": symmetry,
        }

    def _detect_rep(self, pose, details):
        """바닥 자세 판정: 충분한 깊이 + 엉덩이가 무릎선 아래 (단일 프레임)."""
        hip_y = self._center(pose, "Hip")[1]
        knee_y = self._center(pose, "Knee")[1]
        return details["depth"] > self.REP_DEPTH and hip_y > knee_y


# ─── 벤치프레스 평가 ───────────────────────────────────────

def no_rep_signal(pose: PoseFrame, details: Dict[str, float]) -> Optional[bool]:
    """기본 벤치프레스 반복 판정: 단일 프레임 신호 없음."""
    return None


class BenchPressEvaluator(MovementEvaluator):
    """
    벤치프레스 자세 평가기

    체크 항목 (순서 고정):
      1. 팔꿈치 벌어짐: 어깨-팔꿈치-손목 각도 (좌우 평균)
      2. 바 경로:      손목 중점 x - 어깨 중점 x
      3. 좌우 대칭:    어깨-손목 거리 비대칭

    반복 완료 판정은 rep_decider로 주입한다. 주입하지 않으면
    repCompleted는 None (시간축 카운팅은 exercise_counter 담당).
    """

    MOVEMENT = Movement.BENCH
    CAMERA_GUIDANCE = "Position camera to show upper body and bar path. Side angle preferred."

    ELBOW_ERROR = 100
    ELBOW_WARN = 85
    BAR_PATH_ERROR = 0.08
    BAR_PATH_WARN = 0.04
    SYMMETRY_ERROR = 0.1

    def __init__(self, rep_decider: Optional[RepDecider] = None):
        self.rep_decider = rep_decider or no_rep_signal

    def _evaluate_metrics(self, pose, sheet):
        # 1. 팔꿈치 각도
        elbow_l = cal_angle(pose["leftShoulder"], pose["leftElbow"], pose["leftWrist"])
        elbow_r = cal_angle(pose["rightShoulder"], pose["rightElbow"], pose["rightWrist"])
        elbow_angle = (elbow_l + elbow_r) / 2
        if elbow_angle > self.ELBOW_ERROR:
            sheet.error("Elbows too flared - bring them closer to your body", 25)
        elif elbow_angle > self.ELBOW_WARN:
            sheet.warn("Slight elbow flare - try to keep elbows at 45-degree angle", 10)
        else:
            sheet.good("Good elbow position!")

        # 2. 바 경로 (손목으로 근사)
        bar_path = horizontal_offset(self._center(pose, "Wrist"), self._center(pose, "Shoulder"))
        if bar_path > self.BAR_PATH_ERROR:
            sheet.error("Bar drifting - keep it over your shoulders", 20)
        elif bar_path > self.BAR_PATH_WARN:
            sheet.warn("Minor bar drift - focus on straight up and down", 5)
        else:
            sheet.good("Great bar path!")

        # 3. 좌우 대칭
        left_arm = cal_distance(pose["leftShoulder"], pose["leftWrist"])
        right_arm = cal_distance(pose["rightShoulder"], pose["rightWrist"])
        symmetry = self._asymmetry(left_arm, right_arm)
        if symmetry > self.SYMMETRY_ERROR:
            sheet.error("Uneven press - check your grip and shoulder position", 15)

        return {
            "elbowAngle": elbow_angle,
            "barPath": bar_path,
            "symmetry": symmetry,
        }

    def _detect_rep(self, pose, details):
        return self.rep_decider(pose, details)


# ─── 데드리프트 평가 ───────────────────────────────────────

class DeadliftEvaluator(MovementEvaluator):
    """
    데드리프트 자세 평가기

    체크 항목 (순서 고정):
      1. 등 각도:    엉덩이→어깨 벡터의 수평 기준 atan2 각도
      2. 힙 힌지:    엉덩이 중점 - 무릎 중점 거리
      3. 무릎 전진:  무릎 중점 x - 발목 중점 x (발목이 있을 때만)
    """

    MOVEMENT = Movement.DEADLIFT
    CAMERA_GUIDANCE = "Position camera to show full body from the side. Capture entire lift movement."

    BACK_ERROR = 30
    BACK_WARN = 15
    HINGE_ERROR = 0.1
    HINGE_WARN = 0.15
    KNEE_OVER_TOE_ERROR = 0.08
    LOCKOUT_OFFSET = 0.05

    def _evaluate_metrics(self, pose, sheet):
        shoulder_c = self._center(pose, "Shoulder")
        hip_c = self._center(pose, "Hip")
        knee_c = self._center(pose, "Knee")

        # 1. 등 각도
        back_angle = abs(inclination_deg(shoulder_c, hip_c))
        if back_angle > self.BACK_ERROR:
            sheet.error("Back rounding detected - keep your back straight", 30)
        elif back_angle > self.BACK_WARN:
            sheet.warn("Slight back rounding - focus on neutral spine", 10)
        else:
            sheet.good("Good back position!")

        # 2. 힙 힌지
        hip_hinge = cal_distance(hip_c, knee_c)
        if hip_hinge < self.HINGE_ERROR:
            sheet.error("Not enough hip hinge - push your hips back", 25)
        elif hip_hinge < self.HINGE_WARN:
            sheet.warn("Good hip hinge, try to push hips back slightly more", 5)
        else:
            sheet.good("Excellent hip hinge pattern!")

        details = {"backAngle": back_angle, "hipHinge": hip_hinge}

        # 3. 무릎 전진 (발목 없으면 생략)
        if has_all(pose, self.optional_landmarks):
            knee_over_toe = horizontal_offset(knee_c, self._center(pose, "Ankle"))
            if knee_over_toe > self.KNEE_OVER_TOE_ERROR:
                sheet.error("Knees too far forward - keep shins more vertical", 15)
            details["kneeOverToe"] = knee_over_toe

        return details

    def _detect_rep(self, pose, details):
        """락아웃 판정: 어깨 중점이 엉덩이 중점 바로 위 (상체 직립)."""
        torso_offset = horizontal_offset(self._center(pose, "Shoulder"), self._center(pose, "Hip"))
        return torso_offset < self.LOCKOUT_OFFSET

"""
세션 분석기

프레임 시퀀스를 단일 프레임 평가기에 차례로 넣고,
phase 감지기 + 반복 카운터로 시간축 반복 수를 센 뒤 세션 요약을 만든다.
"""
import logging
from collections import Counter
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

import numpy as np

from lift_modules import config
from lift_modules.coord_filter import KeypointSmoother
from lift_modules.exercise_counter import RepCounter
from lift_modules.form_analyzer import analyze, canonicalize_movement, get_camera_guidance, get_evaluator
from lift_modules.phase_detector import create_phase_detector, extract_phase_metric
from lift_modules.pose_types import FeedbackStatus, FormFeedback, Movement, PoseFrame
from lift_modules.posture_evaluator import BenchPressEvaluator, RepDecider

logger = logging.getLogger(__name__)

PoseInput = Union[PoseFrame, Mapping[str, Any], None]


class SessionAnalyzer:
    """
    한 세트(세션) 분석기. 호출자 하나가 소유하며 스레드 간 공유하지 않는다.

    Args:
        movement: 운동 id (지원하지 않으면 ValueError)
        fps: 호출 측 프레임 샘플링 속도 (타임스탬프가 없을 때 시간 계산에 사용)
        smooth: 랜드마크 이동 평균 스무딩 여부
        rep_decider: 벤치프레스 단일 프레임 반복 판정 함수 (선택)
    """

    def __init__(
        self,
        movement: Union[str, Movement],
        fps: float = config.DEFAULT_FPS,
        smooth: bool = True,
        rep_decider: Optional[RepDecider] = None,
    ):
        self.movement = canonicalize_movement(movement)
        if fps <= 0:
            raise ValueError("fps는 0보다 커야 합니다.")
        self.fps = float(fps)

        if self.movement is Movement.BENCH and rep_decider is not None:
            self.evaluator = BenchPressEvaluator(rep_decider=rep_decider)
        else:
            self.evaluator = get_evaluator(self.movement)

        self.smoother = (
            KeypointSmoother(window=config.SMOOTHING_WINDOW, jump_threshold=config.SMOOTHING_JUMP_THRESHOLD)
            if smooth else None
        )
        self.phase_detector = create_phase_detector(self.movement)
        self.counter = RepCounter(fps=self.fps)
        self.reset()

    def reset(self):
        if self.smoother is not None:
            self.smoother.reset()
        self.phase_detector.reset()
        self.counter.reset()
        self.frame_count = 0
        self.frame_scores: List[dict] = []
        self.error_frames: List[dict] = []
        self._first_ts: Optional[float] = None
        self._last_ts: Optional[float] = None

    def update(self, pose: PoseInput) -> FormFeedback:
        """프레임 하나를 평가하고 시간축 상태를 갱신한다."""
        frame_idx = self.frame_count
        self.frame_count += 1

        frame = pose if (pose is None or isinstance(pose, PoseFrame)) else PoseFrame.from_dict(pose)
        if frame is None or not frame.keypoints:
            self.counter.update(None)
            return FormFeedback(status=FeedbackStatus.NO_POSE, movement=self.movement)

        if self._first_ts is None:
            self._first_ts = frame.timestamp
        self._last_ts = frame.timestamp

        if self.smoother is not None:
            frame = self.smoother.smooth(frame)

        result = analyze(self.movement, frame, evaluator=self.evaluator)
        if not result.is_valid:
            self.counter.update(None)
            return result

        metric = extract_phase_metric(frame, self.movement)
        phase = self.phase_detector.update(metric) if metric is not None else self.phase_detector.phase
        rep_counted = self.counter.update(phase)
        if rep_counted:
            logger.info(f"{self.movement.value} 반복 {self.counter.count}회 (frame {frame_idx})")

        record = {
            "frame_idx": frame_idx,
            "timestamp": frame.timestamp,
            "phase": phase,
            "score": result.score,
            "feedback": list(result.feedback),
            "errors": list(result.errors),
            "details": dict(result.details),
            "rep_completed": result.rep_completed,
            "rep_counted": rep_counted,
        }
        self.frame_scores.append(record)
        if result.errors and len(self.error_frames) < config.MAX_ERROR_FRAMES:
            self.error_frames.append(record)

        return result

    @property
    def rep_count(self) -> int:
        return self.counter.count

    def duration(self) -> float:
        """타임스탬프(초)가 있으면 첫/마지막 차이, 없으면 프레임 수 / fps."""
        if self._first_ts is not None and self._last_ts is not None and self._last_ts > self._first_ts:
            return float(self._last_ts - self._first_ts)
        return self.frame_count / self.fps

    def summary(self) -> Dict[str, Any]:
        scores = [f["score"] for f in self.frame_scores]
        error_counter = Counter(e for f in self.frame_scores for e in f["errors"])
        feedback_counter = Counter(m for f in self.frame_scores for m in f["feedback"])

        return {
            "movement": self.movement.value,
            "rep_count": self.rep_count,
            "frame_count": self.frame_count,
            "scored_frame_count": len(self.frame_scores),
            "average_score": round(float(np.mean(scores)), 1) if scores else None,
            "best_score": float(max(scores)) if scores else None,
            "worst_score": float(min(scores)) if scores else None,
            "duration": round(self.duration(), 1),
            "fps": self.fps,
            "common_errors": [
                {"error": err, "count": n}
                for err, n in error_counter.most_common(config.COMMON_ERROR_TOP_K)
            ],
            "feedback_counts": dict(feedback_counter),
            "frame_scores": list(self.frame_scores),
            "error_frames": list(self.error_frames),
            "guidance": get_camera_guidance(self.movement),
        }


def analyze_session(
    movement: Union[str, Movement],
    frames: Iterable[PoseInput],
    fps: float = config.DEFAULT_FPS,
    smooth: bool = True,
    rep_decider: Optional[RepDecider] = None,
) -> Dict[str, Any]:
    """프레임 시퀀스 전체를 분석해 세션 요약 dict를 반환한다."""
    session = SessionAnalyzer(movement, fps=fps, smooth=smooth, rep_decider=rep_decider)
    for pose in frames:
        session.update(pose)
    return session.summary()

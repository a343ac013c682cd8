"""
랜드마크 좌표 스무딩 필터

이동 평균(window=3)으로 프레임 간 랜드마크 떨림을 제거한다.
세션 분석에서만 사용하며 단일 프레임 평가는 원본 좌표를 그대로 쓴다.
"""
from collections import deque
from typing import Optional

from lift_modules.pose_types import Landmark, PoseFrame


class KeypointSmoother:
    """이동 평균 기반 랜드마크 스무더 (이상치 감쇠 포함)."""

    def __init__(self, window=3, jump_threshold=0.15):
        self.window = max(1, int(window))  # 0 이하면 평균 분모가 0
        self.jump_threshold = jump_threshold
        self._history = {}  # {landmark_name: deque([(x, y), ...])}

    def reset(self):
        self._history.clear()

    def smooth(self, pose: Optional[PoseFrame]) -> Optional[PoseFrame]:
        """
        pose를 스무딩한 새 PoseFrame을 반환한다.
        이전 평균 대비 jump_threshold 이상 점프하는 좌표는 70:30 비율로 블렌딩한다.
        z, visibility는 현재 프레임 값을 유지한다.
        """
        if pose is None:
            return None

        smoothed = {}
        for name, lm in pose.keypoints.items():
            if name not in self._history:
                self._history[name] = deque(maxlen=self.window)

            buf = self._history[name]
            coord = (lm.x, lm.y)

            # 이상치 감쇠: 기존 평균 대비 큰 점프 시 블렌딩
            if len(buf) >= 1:
                prev_avg_x = sum(c[0] for c in buf) / len(buf)
                prev_avg_y = sum(c[1] for c in buf) / len(buf)
                dx = abs(coord[0] - prev_avg_x)
                dy = abs(coord[1] - prev_avg_y)
                if dx > self.jump_threshold or dy > self.jump_threshold:
                    coord = (
                        prev_avg_x * 0.7 + coord[0] * 0.3,
                        prev_avg_y * 0.7 + coord[1] * 0.3,
                    )

            buf.append(coord)

            avg_x = sum(c[0] for c in buf) / len(buf)
            avg_y = sum(c[1] for c in buf) / len(buf)
            smoothed[name] = Landmark(x=avg_x, y=avg_y, z=lm.z, visibility=lm.visibility)

        return PoseFrame(keypoints=smoothed, timestamp=pose.timestamp)

"""
Phase 기반 반복 카운터

top과 bottom을 모두 방문한 뒤 다시 top(락아웃)에 도달하면 1회로 센다.
세 운동 모두 반복은 top에서 끝난다.
"""
from typing import Optional


class RepCounter:
    """반복 카운터 (top+bottom 방문 후 top 복귀 시 카운트)."""

    _BASE_FPS = 10.0
    _BASE_INACTIVE_THRESH = 10  # 기준 10 FPS에서 1.0초

    def __init__(self, fps: float = 10.0):
        self.count = 0
        self.inactive_frames = 0
        self.required_sequence = {"top", "bottom"}
        self.min_required = 2
        self.visited_phases = set()
        self._count_gate_phase = None

        ratio = max(fps, 1.0) / self._BASE_FPS
        self.inactive_threshold = max(1, round(self._BASE_INACTIVE_THRESH * ratio))

    def reset(self):
        self.count = 0
        self.inactive_frames = 0
        self.visited_phases.clear()
        self._count_gate_phase = None

    def update(self, current_phase: Optional[str]) -> bool:
        """
        현재 phase를 반영한다. 포즈가 없는 프레임은 None.

        Returns:
            이번 프레임에서 반복이 완료되었으면 True
        """
        if current_phase is None:
            self.inactive_frames += 1
            if self.inactive_frames > self.inactive_threshold:
                self.visited_phases.clear()
                self._count_gate_phase = None
            return False

        self.inactive_frames = 0

        if current_phase in self.required_sequence:
            self.visited_phases.add(current_phase)

        if current_phase == "top":
            matched = len(self.visited_phases & self.required_sequence)
            if matched >= self.min_required and self._count_gate_phase != "top":
                self.count += 1
                self.visited_phases = {"top"}
                self._count_gate_phase = "top"
                return True
        else:
            self._count_gate_phase = None

        return False

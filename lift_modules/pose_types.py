"""
자세 분석 데이터 타입

포즈 추정기 출력(랜드마크 dict)과 평가 결과를 표현하는 Data Class 모음.
"""
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional


class Movement(str, Enum):
    """지원 운동 종류 (닫힌 집합)."""
    SQUAT = "squat"
    BENCH = "bench"
    DEADLIFT = "deadlift"


class FeedbackStatus(str, Enum):
    """평가 결과 태그."""
    OK = "ok"
    INCOMPLETE_POSE = "incomplete_pose"
    NO_POSE = "no_pose"
    UNSUPPORTED_MOVEMENT = "unsupported_movement"


def _to_float(value, name: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"랜드마크 좌표 '{name}'가 숫자가 아닙니다: {value!r}") from e


@dataclass(frozen=True)
class Landmark:
    """
    정규화 이미지 좌표 상의 관절 위치.

    Attributes:
        x, y: 0~1 정규화 좌표 (y는 아래 방향으로 증가)
        z: 깊이 (선택)
        visibility: 신뢰도 0~1 (선택)
    """
    x: float
    y: float
    z: Optional[float] = None
    visibility: Optional[float] = None

    @classmethod
    def from_value(cls, value: Any) -> "Landmark":
        """dict({"x":..,"y":..}) 또는 [x, y(, z)] 시퀀스를 Landmark로 변환한다."""
        if isinstance(value, Landmark):
            return value
        if isinstance(value, Mapping):
            if "x" not in value or "y" not in value:
                raise ValueError(f"랜드마크에 x/y 좌표가 없습니다: {dict(value)!r}")
            z = value.get("z")
            vis = value.get("visibility", value.get("vis"))
            return cls(
                x=_to_float(value["x"], "x"),
                y=_to_float(value["y"], "y"),
                z=None if z is None else _to_float(z, "z"),
                visibility=None if vis is None else _to_float(vis, "visibility"),
            )
        try:
            coords = list(value)
        except TypeError as e:
            raise ValueError(f"지원하지 않는 랜드마크 형식: {value!r}") from e
        if len(coords) not in (2, 3):
            raise ValueError(f"랜드마크 시퀀스는 길이 2 또는 3이어야 합니다: {value!r}")
        z = _to_float(coords[2], "z") if len(coords) == 3 else None
        return cls(x=_to_float(coords[0], "x"), y=_to_float(coords[1], "y"), z=z)


@dataclass
class PoseFrame:
    """
    한 프레임의 랜드마크 집합.

    키가 없으면 "이번 프레임에서 관측되지 않음"을 의미한다
    (visibility가 낮은 랜드마크와는 구분된다).
    """
    keypoints: Dict[str, Landmark] = field(default_factory=dict)
    timestamp: float = 0.0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PoseFrame":
        """{"keypoints": {...}, "timestamp": ...} 형태의 dict를 PoseFrame으로 변환한다."""
        raw = data.get("keypoints") or {}
        keypoints = {
            name: Landmark.from_value(value)
            for name, value in raw.items()
            if value is not None
        }
        return cls(keypoints=keypoints, timestamp=_to_float(data.get("timestamp", 0.0), "timestamp"))

    def has(self, name: str) -> bool:
        return name in self.keypoints

    def __getitem__(self, name: str) -> Landmark:
        return self.keypoints[name]


def clamp_score(score: float) -> float:
    """점수를 [0, 100]으로 자른다. NaN은 0."""
    if not math.isfinite(score):
        return 0.0
    return float(min(100.0, max(0.0, score)))


@dataclass
class FormFeedback:
    """
    단일 프레임 평가 결과.

    feedback/errors 순서는 운동별 규칙 평가 순서를 그대로 따른다.
    details는 랜드마크 검증을 통과했을 때만 채워진다.
    """
    score: float = 0.0
    feedback: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    rep_completed: Optional[bool] = None
    details: Dict[str, float] = field(default_factory=dict)
    status: FeedbackStatus = FeedbackStatus.OK
    movement: Optional[Movement] = None

    def __post_init__(self):
        self.score = clamp_score(self.score)

    @property
    def is_valid(self) -> bool:
        return self.status is FeedbackStatus.OK

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "feedback": list(self.feedback),
            "errors": list(self.errors),
            "repCompleted": self.rep_completed,
            "details": dict(self.details),
            "status": self.status.value,
            "movement": self.movement.value if self.movement else None,
        }

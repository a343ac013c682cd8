"""
엔진/세션/API 설정

환경변수(.env 포함)로 덮어쓸 수 있다.
평가 임계값은 각 평가기 클래스의 상수로 관리한다.
"""
import os

from dotenv import load_dotenv

load_dotenv()


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


# ===== 로깅 =====
LOG_LEVEL = os.environ.get("LIFT_LOG_LEVEL", "INFO").upper()

# ===== 세션 분석 =====
DEFAULT_FPS = _env_float("LIFT_DEFAULT_FPS", 10.0)     # 호출 측 프레임 샘플링 속도
MIN_FPS, MAX_FPS = 1, 60

# 키포인트 스무딩 (이동 평균)
SMOOTHING_WINDOW = max(1, int(_env_float("LIFT_SMOOTHING_WINDOW", 3)))
SMOOTHING_JUMP_THRESHOLD = _env_float("LIFT_SMOOTHING_JUMP", 0.15)

# 세션 요약에 담을 에러 프레임 최대 개수
MAX_ERROR_FRAMES = int(_env_float("LIFT_MAX_ERROR_FRAMES", 50))
COMMON_ERROR_TOP_K = 3

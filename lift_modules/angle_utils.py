"""
각도/거리 계산 유틸리티

모든 좌표는 정규화 이미지 좌표(0~1, y축은 아래 방향)를 가정한다.
입력은 Landmark 또는 [x, y] 형태의 시퀀스 모두 허용한다.
"""
import math

import numpy as np
from numpy import degrees, arccos, dot as np_dot
from numpy.linalg import norm

_EPS = 1e-8


def _xy(p):
    """Landmark 또는 시퀀스에서 (x, y) numpy 배열을 꺼낸다."""
    if hasattr(p, "x") and hasattr(p, "y"):
        return np.array([p.x, p.y], dtype=np.float64)
    return np.array([p[0], p[1]], dtype=np.float64)


def vec_sub(a, b):
    """a - b 벡터."""
    return _xy(a) - _xy(b)


def magnitude(v):
    return float(norm(np.asarray(v, dtype=np.float64)))


def dot(u, v):
    return float(np_dot(np.asarray(u, dtype=np.float64), np.asarray(v, dtype=np.float64)))


def cal_angle(A, B, C):
    """
    코사인 법칙으로 ∠ABC를 도(°) 단위로 반환한다.

    벡터 길이가 0이거나 좌표가 NaN/inf이면 0.0을 반환한다.
    반환값은 항상 [0, 180] 범위.
    """
    ba = vec_sub(A, B)
    bc = vec_sub(C, B)
    if not (np.all(np.isfinite(ba)) and np.all(np.isfinite(bc))):
        return 0.0
    norm_ba = magnitude(ba)
    norm_bc = magnitude(bc)
    if norm_ba < _EPS or norm_bc < _EPS:
        return 0.0
    cos_val = np.clip(dot(ba, bc) / (norm_ba * norm_bc), -1.0, 1.0)
    return float(degrees(arccos(cos_val)))


def cal_distance(A, B):
    """두 점 사이의 유클리드 거리를 반환한다."""
    d = magnitude(vec_sub(A, B))
    return d if math.isfinite(d) else 0.0


def midpoint(p1, p2):
    """두 점의 중점을 [x, y]로 반환한다."""
    a, b = _xy(p1), _xy(p2)
    return [float((a[0] + b[0]) / 2), float((a[1] + b[1]) / 2)]


def horizontal_offset(p1, p2):
    """두 점의 x 좌표 차이(절대값)."""
    off = abs(float(_xy(p1)[0] - _xy(p2)[0]))
    return off if math.isfinite(off) else 0.0


def inclination_deg(top, base):
    """base → top 벡터의 수평 기준 각도 (atan2, 도 단위, -180~180)."""
    v = vec_sub(top, base)
    if not np.all(np.isfinite(v)):
        return 0.0
    return float(degrees(math.atan2(v[1], v[0])))


def safe_ratio(num, den):
    """분모가 0 근처이거나 결과가 유한하지 않으면 0.0."""
    if abs(den) < _EPS:
        return 0.0
    r = num / den
    return float(r) if math.isfinite(r) else 0.0

import pytest

from lift_modules import (
    BenchPressEvaluator,
    DeadliftEvaluator,
    FeedbackStatus,
    FormFeedback,
    SquatEvaluator,
)
from tests.poses import (
    BENCH_SLIGHT_FLARE,
    DEADLIFT_STANDING,
    SQUAT_PERFECT,
    make_pose,
    mirror,
)


# ─── 스쿼트 ───────────────────────────────────────────

def test_squat_perfect_form():
    result = SquatEvaluator().evaluate(make_pose(**SQUAT_PERFECT))

    assert result.status is FeedbackStatus.OK
    assert result.score == 100
    assert result.errors == []
    assert result.feedback == ["Excellent depth!", "Great knee tracking!"]
    assert result.details["depth"] == pytest.approx(0.5)
    assert result.details["kneeTracking"] == pytest.approx(1.0)
    assert result.details["symmetry"] == pytest.approx(0.0)
    assert result.details["forwardLean"] == 0.0
    assert result.rep_completed is False


def test_squat_missing_landmark():
    points = dict(SQUAT_PERFECT)
    del points["rightAnkle"]

    result = SquatEvaluator().evaluate(make_pose(**points))

    assert result.status is FeedbackStatus.INCOMPLETE_POSE
    assert result.score == 0
    assert result.feedback == ["Position yourself so your full body is visible"]
    assert result.errors == ["Incomplete pose detection"]
    assert result.details == {}


def test_squat_single_soft_penalty():
    points = dict(SQUAT_PERFECT, leftKnee=(0.42, 0.8), rightKnee=(0.58, 0.8))

    result = SquatEvaluator().evaluate(make_pose(**points))

    assert result.score == pytest.approx(90)
    assert result.feedback == [
        "Excellent depth!",
        "Watch knee alignment - keep them tracking over toes",
    ]
    assert result.errors == []


def test_squat_with_upright_shoulders():
    points = dict(SQUAT_PERFECT, leftShoulder=(0.4, 0.2), rightShoulder=(0.6, 0.2))

    result = SquatEvaluator().evaluate(make_pose(**points))

    assert result.score == 100
    assert result.feedback[-1] == "Good upright posture!"


def test_squat_every_hard_error():
    pose = make_pose(
        leftHip=(0.3, 0.5), rightHip=(0.7, 0.5),
        leftKnee=(0.45, 0.30), rightKnee=(0.55, 0.60),
        leftAnkle=(0.45, 0.9), rightAnkle=(0.55, 0.9),
        leftShoulder=(0.5, 0.2), rightShoulder=(0.9, 0.2),
    )

    result = SquatEvaluator().evaluate(pose)

    assert result.errors == [
        "Squat deeper - hips need to go below knee level",
        "Knees caving in - push knees out over toes",
        "Too much forward lean - keep chest up",
        "Uneven squat - check your stance and balance",
    ]
    assert result.feedback == []
    assert result.score == pytest.approx(100 - 25 - 30 - 20 - 15)


def test_squat_symmetry_is_mirror_invariant():
    pose = make_pose(
        leftHip=(0.3, 0.5), rightHip=(0.7, 0.5),
        leftKnee=(0.3, 0.65), rightKnee=(0.7, 0.8),
        leftAnkle=(0.3, 0.95), rightAnkle=(0.7, 0.95),
    )
    evaluator = SquatEvaluator()

    original = evaluator.evaluate(pose)
    swapped = evaluator.evaluate(mirror(pose))

    assert original.details["symmetry"] == pytest.approx(swapped.details["symmetry"])
    assert original.details["symmetry"] > 0.15


def test_squat_degenerate_hips_do_not_crash():
    pose = make_pose(
        leftHip=(0.5, 0.6), rightHip=(0.5, 0.6),
        leftKnee=(0.5, 0.6), rightKnee=(0.5, 0.6),
        leftAnkle=(0.5, 0.6), rightAnkle=(0.5, 0.6),
    )

    result = SquatEvaluator().evaluate(pose)

    assert 0 <= result.score <= 100
    assert result.details["depth"] == 0.0
    assert result.details["kneeTracking"] == 0.0


def _squat_pose(knee_y=0.5, knee_x=0.1, shoulder_x=None):
    """엉덩이 y=0, 발목 y=1 → depth == knee_y (부동소수 오차 없음)."""
    points = dict(
        leftHip=(-0.1, 0.0), rightHip=(0.1, 0.0),
        leftKnee=(-knee_x, knee_y), rightKnee=(knee_x, knee_y),
        leftAnkle=(-0.1, 1.0), rightAnkle=(0.1, 1.0),
    )
    if shoulder_x is not None:
        points.update(leftShoulder=(shoulder_x, -0.5), rightShoulder=(shoulder_x, -0.5))
    return make_pose(**points)


def test_squat_shallow_depth_warning():
    result = SquatEvaluator().evaluate(_squat_pose(knee_y=0.2))

    assert result.details["depth"] == pytest.approx(0.2)
    assert result.feedback == ["Good depth! Try to go slightly deeper", "Great knee tracking!"]
    assert result.errors == []
    assert result.score == pytest.approx(95)


@pytest.mark.parametrize("knee_y, message", [
    (0.1, "Good depth! Try to go slightly deeper"),
    (0.3, "Excellent depth!"),
])
def test_squat_depth_thresholds_are_strict(knee_y, message):
    result = SquatEvaluator().evaluate(_squat_pose(knee_y=knee_y))

    assert result.details["depth"] == knee_y
    assert result.feedback[0] == message
    assert result.errors == []


def test_squat_knee_tracking_threshold_is_strict():
    pose = make_pose(
        leftHip=(-0.5, 0.0), rightHip=(0.5, 0.0),
        leftKnee=(-0.35, 0.5), rightKnee=(0.35, 0.5),
        leftAnkle=(-0.35, 1.0), rightAnkle=(0.35, 1.0),
    )

    result = SquatEvaluator().evaluate(pose)

    assert result.details["kneeTracking"] == 0.7
    assert result.feedback == [
        "Excellent depth!",
        "Watch knee alignment - keep them tracking over toes",
    ]
    assert result.errors == []
    assert result.score == pytest.approx(90)


def test_squat_slight_forward_lean():
    result = SquatEvaluator().evaluate(_squat_pose(shoulder_x=0.07))

    assert result.details["forwardLean"] == pytest.approx(0.07)
    assert result.feedback[-1] == "Slight forward lean - focus on keeping chest up"
    assert result.errors == []
    assert result.score == pytest.approx(95)


def test_squat_forward_lean_threshold_is_strict():
    result = SquatEvaluator().evaluate(_squat_pose(shoulder_x=0.1))

    assert result.details["forwardLean"] == 0.1
    assert result.feedback[-1] == "Slight forward lean - focus on keeping chest up"
    assert result.errors == []


# ─── 벤치프레스 ───────────────────────────────────────

def test_bench_slight_elbow_flare():
    result = BenchPressEvaluator().evaluate(make_pose(**BENCH_SLIGHT_FLARE))

    assert result.details["elbowAngle"] == pytest.approx(90.0)
    assert result.score == pytest.approx(90)
    assert result.feedback[0].startswith("Slight elbow flare")
    assert result.feedback[1] == "Great bar path!"
    assert result.errors == []


def test_bench_every_hard_error():
    pose = make_pose(
        leftShoulder=(0.3, 0.3), leftElbow=(0.2, 0.5), leftWrist=(0.45, 0.7),
        rightShoulder=(0.5, 0.3), rightElbow=(0.6, 0.4), rightWrist=(0.8, 0.45),
    )

    result = BenchPressEvaluator().evaluate(pose)

    assert result.errors == [
        "Elbows too flared - bring them closer to your body",
        "Bar drifting - keep it over your shoulders",
        "Uneven press - check your grip and shoulder position",
    ]
    assert result.score == pytest.approx(100 - 25 - 20 - 15)


def test_bench_is_deterministic_without_rep_decider():
    evaluator = BenchPressEvaluator()
    pose = make_pose(**BENCH_SLIGHT_FLARE)

    results = [evaluator.evaluate(pose).to_dict() for _ in range(5)]

    assert all(r == results[0] for r in results)
    assert results[0]["repCompleted"] is None


def test_bench_injected_rep_decider():
    evaluator = BenchPressEvaluator(rep_decider=lambda pose, details: details["elbowAngle"] < 95)

    assert evaluator.evaluate(make_pose(**BENCH_SLIGHT_FLARE)).rep_completed is True


def test_bench_symmetry_is_mirror_invariant():
    pose = make_pose(
        leftShoulder=(0.3, 0.3), leftElbow=(0.3, 0.5), leftWrist=(0.45, 0.55),
        rightShoulder=(0.7, 0.3), rightElbow=(0.7, 0.5), rightWrist=(0.5, 0.5),
    )
    evaluator = BenchPressEvaluator()

    assert evaluator.evaluate(pose).details["symmetry"] == pytest.approx(
        evaluator.evaluate(mirror(pose)).details["symmetry"]
    )


def test_bench_missing_landmark_message():
    points = dict(BENCH_SLIGHT_FLARE)
    del points["leftWrist"]

    result = BenchPressEvaluator().evaluate(make_pose(**points))

    assert result.feedback == ["Position camera to show your upper body clearly"]
    assert result.errors == ["Incomplete pose detection"]
    assert result.score == 0


def test_bench_tucked_elbows():
    pose = make_pose(
        leftShoulder=(0.3, 0.3), leftElbow=(0.3, 0.5), leftWrist=(0.5, 0.3),
        rightShoulder=(0.7, 0.3), rightElbow=(0.7, 0.5), rightWrist=(0.5, 0.3),
    )

    result = BenchPressEvaluator().evaluate(pose)

    assert result.details["elbowAngle"] == pytest.approx(45.0)
    assert result.feedback == ["Good elbow position!", "Great bar path!"]
    assert result.score == 100


def test_bench_minor_bar_drift():
    pose = make_pose(
        leftShoulder=(0.3, 0.3), leftElbow=(0.3, 0.5), leftWrist=(0.36, 0.1),
        rightShoulder=(0.7, 0.3), rightElbow=(0.7, 0.5), rightWrist=(0.76, 0.1),
    )

    result = BenchPressEvaluator().evaluate(pose)

    assert result.details["barPath"] == pytest.approx(0.06)
    assert result.feedback == [
        "Good elbow position!",
        "Minor bar drift - focus on straight up and down",
    ]
    assert result.errors == []
    assert result.score == pytest.approx(95)


def test_bench_bar_path_threshold_is_strict():
    # 어깨 중점 x=0, 손목 중점 x=0.08
    pose = make_pose(
        leftShoulder=(-0.01, 0.5), leftElbow=(-0.01, 0.7), leftWrist=(0.08, 0.1),
        rightShoulder=(0.01, 0.5), rightElbow=(0.01, 0.7), rightWrist=(0.08, 0.1),
    )

    result = BenchPressEvaluator().evaluate(pose)

    assert result.details["barPath"] == 0.08
    assert result.feedback[-1] == "Minor bar drift - focus on straight up and down"
    assert result.errors == []
    assert result.score == pytest.approx(95)


# ─── 데드리프트 ───────────────────────────────────────

def test_deadlift_standing_lockout():
    result = DeadliftEvaluator().evaluate(make_pose(**DEADLIFT_STANDING))

    # 직립 상체는 수평 기준 90°로 계산된다
    assert result.details["backAngle"] == pytest.approx(90.0)
    assert result.errors == ["Back rounding detected - keep your back straight"]
    assert result.feedback == ["Excellent hip hinge pattern!"]
    assert result.score == pytest.approx(70)
    assert result.rep_completed is True
    assert "kneeOverToe" not in result.details


def test_deadlift_knee_over_toe_with_ankles():
    points = dict(DEADLIFT_STANDING, leftAnkle=(0.35, 0.95), rightAnkle=(0.45, 0.95))

    result = DeadliftEvaluator().evaluate(make_pose(**points))

    assert result.details["kneeOverToe"] == pytest.approx(0.1)
    assert result.errors[-1] == "Knees too far forward - keep shins more vertical"
    assert result.score == pytest.approx(55)


def test_deadlift_flat_back_and_short_hinge():
    pose = make_pose(
        leftShoulder=(0.8, 0.5), rightShoulder=(0.8, 0.5),
        leftHip=(0.5, 0.52), rightHip=(0.5, 0.52),
        leftKnee=(0.45, 0.64), rightKnee=(0.45, 0.64),
    )

    result = DeadliftEvaluator().evaluate(pose)

    assert result.feedback == [
        "Good back position!",
        "Good hip hinge, try to push hips back slightly more",
    ]
    assert result.score == pytest.approx(95)
    assert result.rep_completed is False


def test_deadlift_slight_back_rounding():
    pose = make_pose(
        leftShoulder=(0.8, 0.41), rightShoulder=(0.8, 0.41),
        leftHip=(0.5, 0.52), rightHip=(0.5, 0.52),
        leftKnee=(0.45, 0.72), rightKnee=(0.45, 0.72),
    )

    result = DeadliftEvaluator().evaluate(pose)

    assert 15 < result.details["backAngle"] < 30
    assert result.feedback == [
        "Slight back rounding - focus on neutral spine",
        "Excellent hip hinge pattern!",
    ]
    assert result.errors == []
    assert result.score == pytest.approx(90)


def test_deadlift_not_enough_hinge():
    pose = make_pose(
        leftShoulder=(0.8, 0.5), rightShoulder=(0.8, 0.5),
        leftHip=(0.5, 0.52), rightHip=(0.5, 0.52),
        leftKnee=(0.45, 0.58), rightKnee=(0.45, 0.58),
    )

    result = DeadliftEvaluator().evaluate(pose)

    assert result.details["hipHinge"] < 0.1
    assert result.errors == ["Not enough hip hinge - push your hips back"]
    assert result.feedback == ["Good back position!"]
    assert result.score == pytest.approx(75)


@pytest.mark.parametrize("knee_y, message, score", [
    (0.1, "Good hip hinge, try to push hips back slightly more", 95),
    (0.15, "Excellent hip hinge pattern!", 100),
])
def test_deadlift_hinge_thresholds_are_strict(knee_y, message, score):
    # 엉덩이 (0, 0) → 무릎 (0, knee_y): hipHinge == knee_y
    pose = make_pose(
        leftShoulder=(0.3, 0.0), rightShoulder=(0.3, 0.0),
        leftHip=(0.0, 0.0), rightHip=(0.0, 0.0),
        leftKnee=(0.0, knee_y), rightKnee=(0.0, knee_y),
    )

    result = DeadliftEvaluator().evaluate(pose)

    assert result.details["hipHinge"] == knee_y
    assert result.feedback == ["Good back position!", message]
    assert result.errors == []
    assert result.score == pytest.approx(score)


def test_deadlift_knees_over_ankles_pass():
    points = dict(DEADLIFT_STANDING, leftAnkle=(0.45, 0.95), rightAnkle=(0.55, 0.95))

    result = DeadliftEvaluator().evaluate(make_pose(**points))

    assert result.details["kneeOverToe"] == pytest.approx(0.0)
    assert result.errors == ["Back rounding detected - keep your back straight"]
    assert result.score == pytest.approx(70)


def test_deadlift_missing_landmark_message():
    points = dict(DEADLIFT_STANDING)
    del points["leftShoulder"]

    result = DeadliftEvaluator().evaluate(make_pose(**points))

    assert result.feedback == ["Position yourself so your full body is visible from the side"]
    assert result.details == {}


# ─── 결과 타입 ───────────────────────────────────────

def test_score_is_clamped():
    assert FormFeedback(score=-20).score == 0
    assert FormFeedback(score=140).score == 100
    assert FormFeedback(score=float("nan")).score == 0


def test_to_dict_uses_camel_case():
    record = SquatEvaluator().evaluate(make_pose(**SQUAT_PERFECT)).to_dict()

    assert set(record) == {"score", "feedback", "errors", "repCompleted", "details", "status", "movement"}
    assert record["movement"] == "squat"
    assert record["status"] == "ok"

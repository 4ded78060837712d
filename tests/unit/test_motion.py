import numpy as np
import pytest

from rgbdsim.core.image import PoseVector
from rgbdsim.motion.pose import Pose
from rgbdsim.motion.trajectory import KeyframeTrajectory, StaticTrajectory


def test_compose_follows_frame_subscripts() -> None:
    X_AB = Pose.from_xyz_rpy((1.0, 0.0, 0.0), (0.0, 0.0, 90.0))
    X_BC = Pose.from_xyz_rpy((1.0, 0.0, 0.0), (0.0, 0.0, 0.0))
    X_AC = X_AB @ X_BC
    np.testing.assert_allclose(X_AC.t, [1.0, 1.0, 0.0], atol=1e-12)
    np.testing.assert_allclose(X_AC.R, X_AB.R, atol=1e-12)


def test_inverse_round_trip() -> None:
    X_AB = Pose.from_xyz_rpy((0.3, -1.2, 2.0), (10.0, -20.0, 135.0))
    assert (X_AB @ X_AB.inverse()).allclose(Pose.identity())
    assert (X_AB.inverse() @ X_AB).allclose(Pose.identity())


def test_identity_composition_is_exact() -> None:
    X_PB = Pose.from_xyz_rpy((0.1, 0.2, 0.3), (5.0, 15.0, 25.0))
    X_WB = Pose.identity() @ X_PB
    np.testing.assert_array_equal(X_WB.t, X_PB.t)
    np.testing.assert_array_equal(X_WB.R, X_PB.R)


@pytest.mark.parametrize(
    "rpy_deg",
    [(0.0, 0.0, 0.0), (0.0, 0.0, 180.0), (180.0, 0.0, 0.0), (0.0, 180.0, 0.0), (30.0, -45.0, 170.0)],
)
def test_quaternion_is_unit_canonical_and_reconstructs_rotation(rpy_deg) -> None:
    pose = Pose.from_xyz_rpy((1.0, 2.0, 3.0), rpy_deg)
    w, x, y, z = pose.to_quaternion()
    assert w >= 0.0
    assert np.isclose(w * w + x * x + y * y + z * z, 1.0)
    rebuilt = Pose.from_xyz_quaternion(pose.t, (w, x, y, z))
    np.testing.assert_allclose(rebuilt.R, pose.R, atol=1e-12)


def test_quaternion_of_yaw() -> None:
    pose = Pose.from_xyz_rpy((0.0, 0.0, 0.0), (0.0, 0.0, 90.0))
    np.testing.assert_allclose(pose.to_quaternion(), [np.sqrt(0.5), 0.0, 0.0, np.sqrt(0.5)], atol=1e-12)


def test_pose_vector_layout() -> None:
    pv = PoseVector()
    np.testing.assert_array_equal(pv.value, [0.0, 0.0, 0.0, 1.0, 0.0, 0.0, 0.0])
    pv.set_translation((1.0, 2.0, 3.0))
    pv.set_rotation((0.0, 1.0, 0.0, 0.0))
    np.testing.assert_array_equal(pv.translation, [1.0, 2.0, 3.0])
    np.testing.assert_array_equal(pv.rotation, [0.0, 1.0, 0.0, 0.0])
    np.testing.assert_allclose(pv.to_pose().R, np.diag([1.0, -1.0, -1.0]), atol=1e-12)


def test_static_trajectory_timeline() -> None:
    pose = Pose.from_xyz_rpy((0, 0, 10), (0, 0, 0))
    traj = StaticTrajectory(pose, start_time_s=5.0)
    assert list(traj.timeline()) == [(5.0, pose)]
    assert traj.sample(123.0) is pose


def test_keyframe_trajectory_interpolates_and_holds_ends() -> None:
    traj = KeyframeTrajectory([0.0, 2.0], [(0.0, 0.0, 0.0), (4.0, 0.0, 0.0)], yaw_deg=[0.0, 90.0])
    mid = traj.sample(1.0)
    np.testing.assert_allclose(mid.t, [2.0, 0.0, 0.0])
    np.testing.assert_allclose(mid.R, Pose.from_xyz_rpy((0, 0, 0), (0, 0, 45.0)).R, atol=1e-12)
    np.testing.assert_allclose(traj.sample(-1.0).t, [0.0, 0.0, 0.0])
    np.testing.assert_allclose(traj.sample(10.0).t, [4.0, 0.0, 0.0])
    assert [t for t, _ in traj.timeline()] == [0.0, 2.0]


def test_keyframe_trajectory_validates() -> None:
    with pytest.raises(ValueError):
        KeyframeTrajectory([0.0], [(0.0, 0.0, 0.0)])
    with pytest.raises(ValueError):
        KeyframeTrajectory([0.0, 0.0], [(0.0, 0.0, 0.0), (1.0, 0.0, 0.0)])
    with pytest.raises(ValueError):
        KeyframeTrajectory([0.0, 1.0], [(0.0, 0.0, 0.0)])

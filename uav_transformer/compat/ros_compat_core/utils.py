"""
几何工具 (独立运行模式)
"""
import numpy as np

from ...core.data_types import Pose, Point3D, Quaternion
from .tf_transformations import normalize_quaternion, quaternion_matrix, quaternion_multiply


def do_transform_pose(pose: Pose, transform) -> Pose:
    """
    执行 Pose 变换

    Args:
        pose: 带有 position 和 orientation 的 Pose
        transform: TransformStamped，把 child_frame_id 中的位姿映射到 header.frame_id

    Returns:
        变换后的 Pose (新对象)
    """
    t = transform.transform
    q = normalize_quaternion(t.rotation.to_tuple())
    R = quaternion_matrix(q)

    p = pose.position.to_array()
    new_pos = R @ p + t.translation.to_array()

    new_q = quaternion_multiply(q, pose.orientation.to_tuple())

    return Pose(
        position=Point3D.from_array(new_pos),
        orientation=Quaternion.from_tuple(new_q)
    )

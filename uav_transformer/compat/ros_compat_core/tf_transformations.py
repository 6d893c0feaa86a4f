"""
tf.transformations 的独立实现 (欧拉角 / 四元数)
"""
import numpy as np

from ...core.constants import QUATERNION_NORM_SQ_MIN


def euler_from_quaternion(q):
    """
    从四元数计算欧拉角 (roll, pitch, yaw)

    Args:
        q: 四元数 (x, y, z, w)

    Returns:
        (roll, pitch, yaw) 弧度
    """
    x, y, z, w = q

    # 归一化四元数，确保数值稳定性
    norm_sq = x*x + y*y + z*z + w*w
    if norm_sq < QUATERNION_NORM_SQ_MIN:
        return (0.0, 0.0, 0.0)
    if abs(norm_sq - 1.0) > 1e-6:
        norm = np.sqrt(norm_sq)
        x, y, z, w = x/norm, y/norm, z/norm, w/norm

    sinr_cosp = 2 * (w * x + y * z)
    cosr_cosp = 1 - 2 * (x * x + y * y)
    roll = np.arctan2(sinr_cosp, cosr_cosp)

    sinp = np.clip(2 * (w * y - z * x), -1.0, 1.0)
    if abs(sinp) >= 1.0 - 1e-9:
        # 万向节锁
        pitch = np.copysign(np.pi / 2, sinp)
    else:
        pitch = np.arcsin(sinp)

    siny_cosp = 2 * (w * z + x * y)
    cosy_cosp = 1 - 2 * (y * y + z * z)
    yaw = np.arctan2(siny_cosp, cosy_cosp)

    return float(roll), float(pitch), float(yaw)


def quaternion_from_euler(roll, pitch, yaw):
    """
    从欧拉角计算四元数 (x, y, z, w)
    """
    cy = np.cos(yaw * 0.5)
    sy = np.sin(yaw * 0.5)
    cp = np.cos(pitch * 0.5)
    sp = np.sin(pitch * 0.5)
    cr = np.cos(roll * 0.5)
    sr = np.sin(roll * 0.5)

    w = cr * cp * cy + sr * sp * sy
    x = sr * cp * cy - cr * sp * sy
    y = cr * sp * cy + sr * cp * sy
    z = cr * cp * sy - sr * sp * cy
    return (float(x), float(y), float(z), float(w))


def normalize_quaternion(q):
    """归一化四元数，无效四元数返回单位四元数"""
    x, y, z, w = q
    norm_sq = x*x + y*y + z*z + w*w
    if norm_sq < QUATERNION_NORM_SQ_MIN:
        return (0.0, 0.0, 0.0, 1.0)
    norm = np.sqrt(norm_sq)
    return (x/norm, y/norm, z/norm, w/norm)


def quaternion_multiply(q1, q2):
    """四元数乘法 q1 * q2，(x, y, z, w) 格式"""
    x1, y1, z1, w1 = q1
    x2, y2, z2, w2 = q2

    w = w1*w2 - x1*x2 - y1*y2 - z1*z2
    x = w1*x2 + x1*w2 + y1*z2 - z1*y2
    y = w1*y2 - x1*z2 + y1*w2 + z1*x2
    z = w1*z2 + x1*y2 - y1*x2 + z1*w2
    return (x, y, z, w)


def quaternion_matrix(q) -> np.ndarray:
    """四元数转 3x3 旋转矩阵"""
    x, y, z, w = normalize_quaternion(q)
    return np.array([
        [1 - 2*(y*y + z*z), 2*(x*y - z*w), 2*(x*z + y*w)],
        [2*(x*y + z*w), 1 - 2*(x*x + z*z), 2*(y*z - x*w)],
        [2*(x*z - y*w), 2*(y*z + x*w), 1 - 2*(x*x + y*y)]
    ])

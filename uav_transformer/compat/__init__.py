"""
ROS 兼容层模块

用于非 ROS 环境下的兼容实现，使 uav_transformer 可以独立运行。

重要说明:
=========
此模块是**生产代码**的一部分，不是测试 mock。

包含:
- StandaloneTF2Buffer: 按时间索引的变换缓存 (tf2_ros.Buffer)
- StandaloneTransformListener: 后台线程写入缓存 (tf2_ros.TransformListener)
- tf.transformations 的欧拉角/四元数函数
- TF2 异常类型

命名约定:
=========
- "Standalone" 前缀表示独立运行模式的实现
"""

from .ros_compat_core import (
    StandaloneTF2Buffer,
    StandaloneTransformListener,
    # 异常类型
    TransformException,
    LookupException,
    ExtrapolationException,
    ConnectivityException,
    # 几何
    euler_from_quaternion,
    quaternion_from_euler,
    do_transform_pose,
)

__all__ = [
    'StandaloneTF2Buffer',
    'StandaloneTransformListener',
    'TransformException',
    'LookupException',
    'ExtrapolationException',
    'ConnectivityException',
    'euler_from_quaternion',
    'quaternion_from_euler',
    'do_transform_pose',
]

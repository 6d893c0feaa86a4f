"""
UAV 坐标变换器 (UAV Transformer)

版本: v1.0.0

带命名空间约定的坐标变换库，面向多机 UAV 系统。

特性:
- 坐标系名解析: 空名称 -> 当前控制坐标系，裸名称 -> '<uav_name>/<name>'
- 按时间索引的 TF 缓存: 精确时间查询失败后降级为最新可用变换
- 经纬度伪坐标系: 通过 UTM 投影与线性变换链拼接
- 线程安全: 控制坐标系、UTM 区、TF 缓存句柄各自独立加锁
- 独立运行: 不依赖 ROS，ROS 兼容层位于 compat/

使用示例:
    from uav_transformer import Transformer

    transformer = Transformer('planner', uav_name='uav1')
    transformer.set_current_control_frame('uav1/fcu')
    transformer.listener.publish(tf_msg)

    pose_world = transformer.transform_single('world', pose)
"""

__version__ = "1.0.0"

from .config.default_config import DEFAULT_CONFIG, get_config_value, validate_config
from .core.constants import LATEST_TIME, LATLON_ORIGIN, UTM_ORIGIN
from .core.enums import TransformError, RequestKind
from .core.data_types import (
    Header, Vector3, Point3D, Quaternion, Pose, PoseStamped,
    Transform, TransformStamped, Reference, ReferenceStamped
)
from .transform import (
    Transformer, TransformRequest, TransformOutcome, StampedTransform, UTMZone
)

__all__ = [
    '__version__',
    # 变换器
    'Transformer', 'TransformRequest', 'TransformOutcome', 'StampedTransform', 'UTMZone',
    # 配置
    'DEFAULT_CONFIG', 'get_config_value', 'validate_config',
    # 常量 / 枚举
    'LATEST_TIME', 'LATLON_ORIGIN', 'UTM_ORIGIN', 'TransformError', 'RequestKind',
    # 数据类型
    'Header', 'Vector3', 'Point3D', 'Quaternion', 'Pose', 'PoseStamped',
    'Transform', 'TransformStamped', 'Reference', 'ReferenceStamped',
]

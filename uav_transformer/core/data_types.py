"""
数据类型定义

与 ROS geometry_msgs 保持同构的轻量数据类，字段名与消息定义一致，
便于在 ROS 节点与独立运行模式之间直接转换。
"""
from dataclasses import dataclass, field
import copy

import numpy as np


@dataclass
class Header:
    """消息头"""
    stamp: float = 0.0
    frame_id: str = ''


@dataclass
class Vector3:
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def to_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=np.float64)


@dataclass
class Point3D:
    """三维点"""
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def to_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=np.float64)

    @classmethod
    def from_array(cls, arr) -> 'Point3D':
        return cls(x=float(arr[0]), y=float(arr[1]), z=float(arr[2]))


@dataclass
class Quaternion:
    """四元数 (x, y, z, w)，默认单位四元数"""
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    w: float = 1.0

    def to_tuple(self):
        return (self.x, self.y, self.z, self.w)

    @classmethod
    def from_tuple(cls, q) -> 'Quaternion':
        return cls(x=float(q[0]), y=float(q[1]), z=float(q[2]), w=float(q[3]))


@dataclass
class Pose:
    position: Point3D = field(default_factory=Point3D)
    orientation: Quaternion = field(default_factory=Quaternion)


@dataclass
class PoseStamped:
    """带时间戳和坐标系的位姿"""
    header: Header = field(default_factory=Header)
    pose: Pose = field(default_factory=Pose)

    def copy(self) -> 'PoseStamped':
        return copy.deepcopy(self)


@dataclass
class Transform:
    """刚体变换"""
    translation: Vector3 = field(default_factory=Vector3)
    rotation: Quaternion = field(default_factory=Quaternion)


@dataclass
class TransformStamped:
    """
    带时间戳的刚体变换

    header.frame_id 为父坐标系 (目标坐标系)，child_frame_id 为子坐标系 (源坐标系)，
    即该变换把 child_frame_id 中的点映射到 header.frame_id 中。
    """
    header: Header = field(default_factory=Header)
    child_frame_id: str = ''
    transform: Transform = field(default_factory=Transform)


@dataclass
class Reference:
    """参考点：位置 + 航向角"""
    position: Point3D = field(default_factory=Point3D)
    heading: float = 0.0


@dataclass
class ReferenceStamped:
    """带时间戳和坐标系的参考点"""
    header: Header = field(default_factory=Header)
    reference: Reference = field(default_factory=Reference)

    def copy(self) -> 'ReferenceStamped':
        return copy.deepcopy(self)

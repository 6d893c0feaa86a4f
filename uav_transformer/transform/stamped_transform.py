"""
带时间戳的变换包装

记录变换的起止坐标系 (已解析)、请求时间和实际获取时间。
对于经纬度伪坐标系，transform 为 None，仅用于重新标记坐标系，
不参与线性组合。
"""
from dataclasses import dataclass
from typing import Optional

from ..core.data_types import TransformStamped


@dataclass(frozen=True)
class StampedTransform:
    from_frame: str
    to_frame: str
    requested_stamp: float
    resolved_stamp: float
    transform: Optional[TransformStamped] = None

    @property
    def is_sentinel(self) -> bool:
        """是否为经纬度伪坐标系的占位变换 (无刚体变换数据)"""
        return self.transform is None

    @property
    def data_stamp(self) -> Optional[float]:
        """缓存中变换数据本身的时间"""
        if self.transform is None:
            return None
        return self.transform.header.stamp

    @classmethod
    def sentinel(cls, from_frame: str, to_frame: str, stamp: float) -> 'StampedTransform':
        return cls(from_frame, to_frame, stamp, stamp, None)

"""
共享可变状态：当前控制坐标系、当前 UTM 区

两个注册表各自持有独立的锁，互不阻塞，也不与 TF 缓存共用锁。
创建时为 "未设置" 状态，每次 set() 覆盖旧值并标记为已设置，不提供 unset。
"""
from threading import Lock
from typing import Generic, Optional, Tuple, TypeVar

from .geodetic import UTMZone, lat_lon_to_utm

T = TypeVar('T')


class _Registry(Generic[T]):

    def __init__(self):
        self._value: Optional[T] = None
        self._present = False
        self._lock = Lock()

    def set(self, value: T) -> None:
        with self._lock:
            self._value = value
            self._present = True

    def get(self) -> Tuple[Optional[T], bool]:
        """返回 (值, 是否已设置)"""
        with self._lock:
            return self._value, self._present

    @property
    def is_set(self) -> bool:
        with self._lock:
            return self._present

    def copy_from(self, other: '_Registry[T]') -> None:
        """在 other 的锁内读取，再在自己的锁内写入，两把锁不同时持有"""
        value, present = other.get()
        with self._lock:
            self._value = value
            self._present = present


class ControlFrameRegistry(_Registry[str]):
    """当前控制坐标系 (空坐标系名的默认解析结果)"""
    pass


class UTMZoneRegistry(_Registry[UTMZone]):
    """当前 UTM 区 (UTM -> 经纬度逆投影所需)"""

    def set_from_lat_lon(self, lat: float, lon: float) -> UTMZone:
        """根据当前经纬度锚点设置 UTM 区"""
        _, _, zone = lat_lon_to_utm(lat, lon)
        self.set(zone)
        return zone

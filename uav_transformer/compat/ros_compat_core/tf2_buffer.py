"""
tf2_ros.Buffer 的独立运行实现

按时间索引的变换缓存，由后台生产者 (StandaloneTransformListener) 异步写入，
查询方同步读取。
"""
from bisect import bisect_left
from collections import deque
from threading import RLock
from typing import Dict, List, Optional, Tuple
import logging

from scipy.spatial.transform import Rotation, Slerp

from ...core.constants import LATEST_TIME, EPSILON
from ...core.data_types import Header, Quaternion, Transform, TransformStamped, Vector3
from ...core.time_utils import is_latest
from .exceptions import ConnectivityException, ExtrapolationException, LookupException
from .tf_transformations import normalize_quaternion, quaternion_matrix, quaternion_multiply

logger = logging.getLogger(__name__)


class TransformHistory:
    """
    单条边 (parent -> child) 的时间序列

    按时间戳升序保存，超出 cache_time 的旧数据会被丢弃。
    """

    def __init__(self, cache_time: float):
        self._cache_time = cache_time
        self._stamps: List[float] = []
        self._transforms: List[TransformStamped] = []

    def __len__(self) -> int:
        return len(self._stamps)

    @property
    def newest_stamp(self) -> float:
        return self._stamps[-1] if self._stamps else LATEST_TIME

    @property
    def oldest_stamp(self) -> float:
        return self._stamps[0] if self._stamps else LATEST_TIME

    def insert(self, transform: TransformStamped) -> bool:
        stamp = transform.header.stamp
        if self._stamps and stamp < self._stamps[-1] - self._cache_time:
            # 比缓存窗口还旧的数据直接丢弃
            return False

        idx = bisect_left(self._stamps, stamp)
        if idx < len(self._stamps) and self._stamps[idx] == stamp:
            self._transforms[idx] = transform
        else:
            self._stamps.insert(idx, stamp)
            self._transforms.insert(idx, transform)

        self._prune()
        return True

    def _prune(self) -> None:
        horizon = self._stamps[-1] - self._cache_time
        cut = bisect_left(self._stamps, horizon)
        if cut > 0:
            del self._stamps[:cut]
            del self._transforms[:cut]

    def get(self, time: float) -> Transform:
        """
        获取指定时刻的变换

        Raises:
            ExtrapolationException: 时间超出缓存范围
        """
        if not self._stamps:
            raise ExtrapolationException("Transform history is empty")

        if is_latest(time):
            return self._transforms[-1].transform

        if len(self._stamps) == 1:
            if abs(self._stamps[0] - time) < EPSILON:
                return self._transforms[0].transform
            raise ExtrapolationException(
                f"Lookup would require extrapolation at time {time:.6f}, "
                f"but only time {self._stamps[0]:.6f} is in the buffer")

        if time < self._stamps[0]:
            raise ExtrapolationException(
                f"Lookup would require extrapolation into the past. "
                f"Requested time {time:.6f} but the earliest data is at time {self._stamps[0]:.6f}")
        if time > self._stamps[-1]:
            raise ExtrapolationException(
                f"Lookup would require extrapolation into the future. "
                f"Requested time {time:.6f} but the latest data is at time {self._stamps[-1]:.6f}")

        idx = bisect_left(self._stamps, time)
        if self._stamps[idx] == time:
            return self._transforms[idx].transform

        t0, t1 = self._stamps[idx - 1], self._stamps[idx]
        return interpolate_transform(
            self._transforms[idx - 1].transform, self._transforms[idx].transform,
            (time - t0) / (t1 - t0))


def interpolate_transform(tf0: Transform, tf1: Transform, ratio: float) -> Transform:
    """平移线性插值，旋转球面线性插值"""
    p0 = tf0.translation.to_array()
    p1 = tf1.translation.to_array()
    p = p0 + (p1 - p0) * ratio

    rotations = Rotation.from_quat([
        normalize_quaternion(tf0.rotation.to_tuple()),
        normalize_quaternion(tf1.rotation.to_tuple()),
    ])
    q = Slerp([0.0, 1.0], rotations)([ratio])[0].as_quat()

    return Transform(
        translation=Vector3(float(p[0]), float(p[1]), float(p[2])),
        rotation=Quaternion.from_tuple(q)
    )


def invert_transform(t: Transform) -> Transform:
    """
    SE(3) 逆变换

    对于变换 T = (R, t)，其逆变换为 T^-1 = (R^T, -R^T * t)
    """
    x, y, z, w = normalize_quaternion(t.rotation.to_tuple())
    R = quaternion_matrix((x, y, z, w))
    inv_translation = -R.T @ t.translation.to_array()
    return Transform(
        translation=Vector3(float(inv_translation[0]), float(inv_translation[1]), float(inv_translation[2])),
        rotation=Quaternion(-x, -y, -z, w)
    )


def compose_transforms(t1: Transform, t2: Transform) -> Transform:
    """
    组合两个变换: T_result = T1 * T2

    对于 SE(3): (R1, p1) * (R2, p2) = (R1*R2, R1*p2 + p1)
    """
    q1 = t1.rotation.to_tuple()
    R1 = quaternion_matrix(q1)
    p = R1 @ t2.translation.to_array() + t1.translation.to_array()
    q = quaternion_multiply(normalize_quaternion(q1), normalize_quaternion(t2.rotation.to_tuple()))
    return Transform(
        translation=Vector3(float(p[0]), float(p[1]), float(p[2])),
        rotation=Quaternion.from_tuple(q)
    )


class StandaloneTF2Buffer:
    """
    tf2_ros.Buffer 的独立运行替代实现

    完整 SE(3) 实现，支持:
    - 按时间索引的动态变换 (cache_time 窗口内插值)
    - 静态变换 (与时间无关)
    - 反向变换查找
    - 多跳链式变换查找 (BFS 算法，默认最多 10 跳)
    - LATEST_TIME 查询：使用整条链上的最新公共时间

    写入来自后台线程，查询来自任意线程，内部由一把可重入锁保护。
    """

    MAX_CHAIN_DEPTH = 10

    def __init__(self, cache_time: float = 10.0, max_chain_depth: Optional[int] = None):
        self._cache_time = cache_time
        self._max_chain_depth = max_chain_depth or self.MAX_CHAIN_DEPTH
        self._histories: Dict[Tuple[str, str], TransformHistory] = {}
        self._static_transforms: Dict[Tuple[str, str], Transform] = {}
        self._frame_graph: Dict[str, set] = {}
        self._lock = RLock()

    @property
    def cache_time(self) -> float:
        return self._cache_time

    def set_transform(self, transform: TransformStamped, authority: str = "default") -> bool:
        """写入动态变换"""
        parent, child = transform.header.frame_id, transform.child_frame_id
        if not parent or not child or parent == child:
            logger.warning(f"Ignoring transform with invalid frames '{parent}' -> '{child}' from '{authority}'")
            return False

        with self._lock:
            key = (parent, child)
            history = self._histories.get(key)
            if history is None:
                history = TransformHistory(self._cache_time)
                self._histories[key] = history
            inserted = history.insert(transform)
            if inserted:
                self._update_frame_graph(parent, child)
            else:
                logger.debug(f"Dropped old data for '{parent}' -> '{child}' at {transform.header.stamp:.6f} "
                             f"from '{authority}'")
            return inserted

    def set_transform_static(self, transform: TransformStamped, authority: str = "default") -> bool:
        """写入静态变换"""
        parent, child = transform.header.frame_id, transform.child_frame_id
        if not parent or not child or parent == child:
            logger.warning(f"Ignoring static transform with invalid frames '{parent}' -> '{child}' from '{authority}'")
            return False

        with self._lock:
            self._static_transforms[(parent, child)] = transform.transform
            self._update_frame_graph(parent, child)
            return True

    def _update_frame_graph(self, parent: str, child: str) -> None:
        self._frame_graph.setdefault(parent, set()).add(child)
        self._frame_graph.setdefault(child, set()).add(parent)

    def has_frame(self, frame_id: str) -> bool:
        with self._lock:
            return frame_id in self._frame_graph

    def clear(self) -> None:
        """清除所有动态变换 (静态变换保留)"""
        with self._lock:
            self._histories.clear()
            self._frame_graph = {}
            for parent, child in self._static_transforms:
                self._update_frame_graph(parent, child)

    def lookup_transform(self, target_frame: str, source_frame: str,
                         time: float = LATEST_TIME, timeout: Optional[float] = None) -> TransformStamped:
        """
        查找坐标变换

        Args:
            target_frame: 目标坐标系
            source_frame: 源坐标系
            time: 查询时间 (LATEST_TIME 表示最新可用)
            timeout: 为与 tf2 接口兼容保留，独立模式下不阻塞等待

        Returns:
            TransformStamped，header.frame_id = target_frame，child_frame_id = source_frame，
            header.stamp 为实际使用的数据时间

        Raises:
            LookupException: 坐标系不存在
            ConnectivityException: 坐标系之间没有连接路径
            ExtrapolationException: 请求的时间超出缓存范围
        """
        with self._lock:
            if target_frame == source_frame:
                return self._identity_transform(target_frame, time)

            for frame in (target_frame, source_frame):
                if frame not in self._frame_graph:
                    raise LookupException(f'"{frame}" passed to lookupTransform argument does not exist.')

            path = self._bfs_path(target_frame, source_frame)
            if path is None:
                raise ConnectivityException(
                    f'Could not find a connection between "{target_frame}" and "{source_frame}" '
                    f'because they are not part of the same tree.')

            if is_latest(time):
                time = self._latest_common_time(path)

            result = self._compute_chain_transform(path, time)

        stamped = TransformStamped()
        stamped.header = Header(stamp=time, frame_id=target_frame)
        stamped.child_frame_id = source_frame
        stamped.transform = result
        return stamped

    def can_transform(self, target_frame: str, source_frame: str,
                      time: float = LATEST_TIME, timeout: Optional[float] = None) -> bool:
        """检查变换是否可用"""
        try:
            self.lookup_transform(target_frame, source_frame, time, timeout)
            return True
        except (LookupException, ConnectivityException, ExtrapolationException):
            return False

    def _identity_transform(self, frame_id: str, time: float) -> TransformStamped:
        result = TransformStamped()
        result.header = Header(stamp=time, frame_id=frame_id)
        result.child_frame_id = frame_id
        result.transform = Transform()
        return result

    def _bfs_path(self, target_frame: str, source_frame: str) -> Optional[List[str]]:
        """BFS 查找 target_frame 到 source_frame 的路径，长度受 max_chain_depth 限制"""
        queue = deque([(target_frame, [target_frame])])
        visited = {target_frame}

        while queue:
            current_frame, path = queue.popleft()
            if current_frame == source_frame:
                return path
            if len(path) > self._max_chain_depth:
                continue
            for neighbor in self._frame_graph.get(current_frame, ()):
                if neighbor not in visited:
                    visited.add(neighbor)
                    queue.append((neighbor, path + [neighbor]))
        return None

    def _latest_common_time(self, path: List[str]) -> float:
        """路径上所有动态边的最新时间取最小值；全部为静态边时返回 LATEST_TIME"""
        common = None
        for i in range(len(path) - 1):
            a, b = path[i], path[i + 1]
            for key in ((a, b), (b, a)):
                history = self._histories.get(key)
                if history is not None and len(history) > 0 and key not in self._static_transforms:
                    newest = history.newest_stamp
                    common = newest if common is None else min(common, newest)
                    break
        return LATEST_TIME if common is None else common

    def _edge_transform(self, to_frame: str, from_frame: str, time: float) -> Transform:
        key = (to_frame, from_frame)
        reverse_key = (from_frame, to_frame)

        if key in self._static_transforms:
            return self._static_transforms[key]
        if reverse_key in self._static_transforms:
            return invert_transform(self._static_transforms[reverse_key])

        history = self._histories.get(key)
        if history is not None and len(history) > 0:
            return history.get(time)
        history = self._histories.get(reverse_key)
        if history is not None and len(history) > 0:
            return invert_transform(history.get(time))

        raise ConnectivityException(f'No transform between "{to_frame}" and "{from_frame}"')

    def _compute_chain_transform(self, path: List[str], time: float) -> Transform:
        """
        计算路径上的组合变换

        path: [target_frame, ..., source_frame]
        返回: target_frame <- source_frame 的变换
        """
        result = Transform()
        for i in range(len(path) - 1, 0, -1):
            step = self._edge_transform(path[i - 1], path[i], time)
            result = compose_transforms(step, result)
        return result

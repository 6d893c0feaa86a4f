"""
TF 缓存查询 (两次尝试)

1. 精确时间查询：失败很常见 (数据尚未到达/已过期)，只输出 DEBUG
2. 最新可用查询：成功说明精度下降，失败说明确实没有变换，两者都节流 WARNING
3. 两次均失败返回 None，不再重试，由调用方决定
4. cache_timeout > 0 时拒绝过旧的最新可用数据 (包括直接以 LATEST_TIME 查询的情况)

resolved_stamp 记录变换的获取时刻 (墙钟)，而不是位姿的逻辑时间。
"""
from threading import Lock
from typing import Optional
import logging

from ..compat.ros_compat_core import StandaloneTF2Buffer, TransformException
from ..core.constants import LATEST_TIME, LATLON_ORIGIN
from ..core.throttle import RateLimiter, log_throttled
from ..core.time_utils import get_current_time, is_latest
from .frame_resolver import FrameNameResolver
from .stamped_transform import StampedTransform

logger = logging.getLogger(__name__)


class TransformLookup:
    """
    TF 缓存句柄 + 降级查询策略

    句柄锁只保护句柄的读取和替换，查询本身在锁外进行；
    Buffer 内部自带锁，与后台写入线程同步。
    """

    def __init__(self, resolver: FrameNameResolver, buffer: Optional[StandaloneTF2Buffer],
                 node_name: str = '', cache_timeout: float = 0.0,
                 throttle_period: float = 1.0, limiter: Optional[RateLimiter] = None):
        self._resolver = resolver
        self._buffer = buffer
        self._buffer_lock = Lock()
        self._node_name = node_name
        self._cache_timeout = cache_timeout
        self._throttle_period = throttle_period
        self._limiter = limiter or RateLimiter()

    @property
    def buffer(self) -> Optional[StandaloneTF2Buffer]:
        with self._buffer_lock:
            return self._buffer

    def replace_buffer(self, buffer: Optional[StandaloneTF2Buffer]) -> None:
        with self._buffer_lock:
            self._buffer = buffer

    @property
    def cache_timeout(self) -> float:
        return self._cache_timeout

    def get_transform(self, from_frame: str, to_frame: str, stamp: float) -> Optional[StampedTransform]:
        """
        获取 from_frame -> to_frame 在 stamp 时刻的变换

        Returns:
            StampedTransform；涉及经纬度坐标系时返回无数据的占位变换；失败返回 None
        """
        buffer = self.buffer
        if buffer is None:
            return None

        to_resolved = self._resolver.resolve(to_frame)
        from_resolved = self._resolver.resolve(from_frame)
        latlon_resolved = self._resolver.resolve(LATLON_ORIGIN)

        if from_resolved == latlon_resolved or to_resolved == latlon_resolved:
            return StampedTransform.sentinel(from_resolved, to_resolved, stamp)

        # 精确时间
        try:
            transform = buffer.lookup_transform(to_resolved, from_resolved, stamp)
        except TransformException as ex:
            logger.debug(f"[{self._node_name}]: Transformer: Exception caught while constructing transform "
                         f"from '{from_resolved}' to '{to_resolved}': {ex}")
        else:
            now = get_current_time()
            # stamp 为 LATEST_TIME 时与降级查询等价，同样受缓存超时约束
            if is_latest(stamp) and self._is_stale(transform.header.stamp, now):
                self._warn_stale(from_resolved, to_resolved, transform.header.stamp, now)
                return None
            return StampedTransform(from_resolved, to_resolved, stamp, now, transform)

        # 最新可用
        try:
            transform = buffer.lookup_transform(to_resolved, from_resolved, LATEST_TIME)
        except TransformException as ex:
            log_throttled(
                logger, logging.WARNING, self._throttle_period,
                f"[{self._node_name}]: Transformer: Exception caught while constructing transform "
                f"from '{from_resolved}' to '{to_resolved}': {ex}",
                limiter=self._limiter)
            return None

        now = get_current_time()
        if self._is_stale(transform.header.stamp, now):
            self._warn_stale(from_resolved, to_resolved, transform.header.stamp, now)
            return None

        log_throttled(
            logger, logging.WARNING, self._throttle_period,
            f"[{self._node_name}]: Transformer: no transform from '{from_resolved}' to '{to_resolved}' "
            f"at {stamp:.3f}, using the latest available one ({transform.header.stamp:.3f})",
            limiter=self._limiter)
        return StampedTransform(from_resolved, to_resolved, stamp, now, transform)

    def _warn_stale(self, from_resolved: str, to_resolved: str, data_stamp: float, now: float) -> None:
        log_throttled(
            logger, logging.WARNING, self._throttle_period,
            f"[{self._node_name}]: Transformer: latest transform from '{from_resolved}' to '{to_resolved}' "
            f"is {now - data_stamp:.3f}s old (cache timeout {self._cache_timeout:.3f}s)",
            limiter=self._limiter)

    def _is_stale(self, data_stamp: float, now: float) -> bool:
        # 纯静态链没有数据时间
        if self._cache_timeout <= 0 or is_latest(data_stamp):
            return False
        return now - data_stamp > self._cache_timeout

"""
日志节流

按调用位置记录上一次输出时间，周期内的重复消息被丢弃。
与具体日志后端解耦：RateLimiter 只负责判定，log_throttled 负责输出。

使用示例:
    logger = logging.getLogger(__name__)
    log_throttled(logger, logging.WARNING, 1.0, "TF lookup failed: %s", err)
"""
from typing import Callable, Dict, Hashable, Optional, Tuple
from threading import Lock
import logging
import sys

from .time_utils import get_monotonic_time


class RateLimiter:
    """
    基于 "上次输出时间" 的限流器

    每个 key 独立计时，首次调用总是放行。线程安全。
    """

    def __init__(self, clock: Optional[Callable[[], float]] = None):
        self._clock = clock or get_monotonic_time
        self._last_emitted: Dict[Hashable, float] = {}
        self._lock = Lock()

    def should_emit(self, key: Hashable, period: float) -> bool:
        now = self._clock()
        with self._lock:
            last = self._last_emitted.get(key)
            if last is not None and now - last < period:
                return False
            self._last_emitted[key] = now
            return True

    def reset(self) -> None:
        with self._lock:
            self._last_emitted.clear()


# 进程内共享的默认限流器
_default_limiter = RateLimiter()


def _caller_site(depth: int) -> Tuple[str, int]:
    frame = sys._getframe(depth + 1)
    return (frame.f_code.co_filename, frame.f_lineno)


def log_throttled(logger: logging.Logger, level: int, period: float, msg: str, *args,
                  key: Optional[Hashable] = None,
                  limiter: Optional[RateLimiter] = None) -> bool:
    """
    节流输出一条日志

    Args:
        logger: 目标 logger
        level: 日志级别
        period: 节流周期 (秒)
        msg, args: 与 logger.log 相同
        key: 节流键，默认使用调用位置 (文件名, 行号)
        limiter: 限流器，默认使用进程内共享实例

    Returns:
        本次是否实际输出
    """
    if key is None:
        key = _caller_site(1)
    limiter = limiter or _default_limiter
    if not limiter.should_emit(key, period):
        return False
    logger.log(level, msg, *args, stacklevel=2)
    return True

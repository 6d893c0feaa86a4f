"""
时间工具

所有时间戳统一使用 float 秒。
- 墙钟时间用于记录变换的获取时刻
- 单调时间用于日志节流
"""
import time

from .constants import LATEST_TIME


def get_current_time() -> float:
    """当前墙钟时间 (秒)"""
    return time.time()


def get_monotonic_time() -> float:
    """单调时钟时间 (秒)，不受系统时间调整影响"""
    return time.monotonic()


def is_latest(stamp: float) -> bool:
    """时间戳是否为 "最新可用" 哨兵"""
    return stamp == LATEST_TIME

"""
测试夹具模块

此模块仅用于测试，不应在生产代码中使用。
"""

from .tf_data import (
    make_transform,
    make_pose,
    make_reference,
    FakeClock,
)

__all__ = [
    'make_transform',
    'make_pose',
    'make_reference',
    'FakeClock',
]

"""核心模块"""
from .constants import LATEST_TIME, LATLON_ORIGIN, UTM_ORIGIN, DEFAULT_NAMESPACE_TOKEN
from .data_types import (
    Header, Vector3, Point3D, Quaternion, Pose, PoseStamped,
    Transform, TransformStamped, Reference, ReferenceStamped
)
from .enums import TransformError, RequestKind
from .throttle import RateLimiter, log_throttled
from .time_utils import get_current_time, get_monotonic_time, is_latest

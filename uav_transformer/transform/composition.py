"""
变换组合引擎

按以下顺序对请求分类，互斥：
1. IDENTITY     源坐标系 == 目标坐标系，不查询缓存
2. FROM_LATLON  源为经纬度伪坐标系：经纬度 -> UTM (非线性)，再 utm_origin -> 目标 (线性)
3. TO_LATLON    目标为经纬度伪坐标系：源 -> utm_origin (线性)，再 UTM -> 经纬度 (非线性)
4. LINEAR       普通刚体变换

TO_LATLON 的非线性步骤使用线性变换之后的中间坐标。
"""
from dataclasses import dataclass, field
from typing import List, Optional
import logging

from ..compat.ros_compat_core import do_transform_pose
from ..core.constants import FRAME_SEPARATOR, LATLON_ORIGIN, UTM_ORIGIN
from ..core.data_types import Header, Pose, PoseStamped
from ..core.enums import RequestKind, TransformError
from ..core.throttle import RateLimiter, log_throttled
from .frame_resolver import FrameNameResolver
from .geodetic import lat_lon_to_utm, utm_to_lat_lon
from .registries import UTMZoneRegistry
from .stamped_transform import StampedTransform
from .tf_lookup import TransformLookup

logger = logging.getLogger(__name__)


@dataclass
class TransformRequest:
    """变换请求，坐标系名为解析前的原始名称"""
    from_frame: str
    to_frame: str
    stamp: float
    pose: Pose = field(default_factory=Pose)

    @classmethod
    def from_pose_stamped(cls, what: PoseStamped, to_frame: str) -> 'TransformRequest':
        return cls(what.header.frame_id, to_frame, what.header.stamp, what.pose)


@dataclass
class TransformOutcome:
    """
    一次请求的结果：成功时 pose 非空，失败时 error 给出分类

    warnings 记录不影响成败的问题 (例如裸坐标系名未加命名空间)。
    """
    pose: Optional[PoseStamped] = None
    error: Optional[TransformError] = None
    kind: Optional[RequestKind] = None
    warnings: List[TransformError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.pose is not None

    @classmethod
    def failure(cls, error: TransformError, kind: Optional[RequestKind] = None) -> 'TransformOutcome':
        return cls(None, error, kind)


class TransformCompositionEngine:

    def __init__(self, resolver: FrameNameResolver, lookup: TransformLookup, utm_zone: UTMZoneRegistry,
                 node_name: str = '', throttle_period: float = 1.0,
                 limiter: Optional[RateLimiter] = None):
        self._resolver = resolver
        self._lookup = lookup
        self._utm_zone = utm_zone
        self._node_name = node_name
        self._throttle_period = throttle_period
        self._limiter = limiter or RateLimiter()

    def latlon_frame(self) -> str:
        return self._resolver.resolve(LATLON_ORIGIN)

    def utm_frame_for(self, frame: str) -> str:
        """与 frame 同命名空间的 utm_origin 坐标系"""
        prefix = self._resolver.get_namespace_prefix(frame)
        if not prefix:
            return UTM_ORIGIN
        return prefix + FRAME_SEPARATOR + UTM_ORIGIN

    def classify(self, from_resolved: str, to_resolved: str) -> RequestKind:
        latlon = self.latlon_frame()
        if from_resolved == to_resolved:
            return RequestKind.IDENTITY
        if from_resolved == latlon:
            return RequestKind.FROM_LATLON
        if to_resolved == latlon:
            return RequestKind.TO_LATLON
        return RequestKind.LINEAR

    def compose(self, request: TransformRequest) -> Optional[PoseStamped]:
        return self.compose_outcome(request).pose

    def compose_outcome(self, request: TransformRequest) -> TransformOutcome:
        """解析请求的两个坐标系，查询变换并作用于位姿"""
        outcome = self._compose(request)
        if any(self._resolver.lacks_namespace(name) for name in (request.from_frame, request.to_frame)):
            outcome.warnings.append(TransformError.MISSING_VEHICLE_NAMESPACE)
        return outcome

    def _compose(self, request: TransformRequest) -> TransformOutcome:
        from_resolved = self._resolver.resolve(request.from_frame)
        to_resolved = self._resolver.resolve(request.to_frame)
        if not from_resolved or not to_resolved:
            return TransformOutcome.failure(TransformError.MISSING_CONTROL_FRAME)

        pose = PoseStamped(header=Header(stamp=request.stamp, frame_id=from_resolved), pose=request.pose)
        if from_resolved == to_resolved:
            return self._identity(pose, to_resolved)

        tf = self._lookup.get_transform(from_resolved, to_resolved, request.stamp)
        if tf is None:
            return TransformOutcome.failure(TransformError.LOOKUP_FAILURE, self.classify(from_resolved, to_resolved))
        return self.apply_outcome(tf, pose)

    def apply(self, tf: StampedTransform, what: PoseStamped) -> Optional[PoseStamped]:
        return self.apply_outcome(tf, what).pose

    def apply_outcome(self, tf: StampedTransform, what: PoseStamped) -> TransformOutcome:
        """把已获取的变换作用于位姿 (位姿不会被修改)"""
        ret = what.copy()
        ret.header.frame_id = self._resolver.resolve(ret.header.frame_id)

        # 已经在目标坐标系
        if ret.header.frame_id == tf.to_frame:
            return self._identity(ret, tf.to_frame)

        kind = self.classify(tf.from_frame, tf.to_frame)
        if kind == RequestKind.FROM_LATLON:
            return self._from_latlon(tf, ret)
        if kind == RequestKind.TO_LATLON:
            return self._to_latlon(tf, ret)
        return self._linear(tf, ret)

    def _identity(self, pose: PoseStamped, to_frame: str) -> TransformOutcome:
        ret = pose.copy()
        ret.header.frame_id = to_frame
        return TransformOutcome(ret, None, RequestKind.IDENTITY)

    def _linear(self, tf: StampedTransform, ret: PoseStamped) -> TransformOutcome:
        if tf.is_sentinel:
            logger.error(f"[{self._node_name}]: Transformer: transform from '{tf.from_frame}' to '{tf.to_frame}' "
                         f"carries no data and cannot be applied linearly")
            return TransformOutcome.failure(TransformError.LOOKUP_FAILURE, RequestKind.LINEAR)
        ret.pose = do_transform_pose(ret.pose, tf.transform)
        ret.header.frame_id = tf.to_frame
        return TransformOutcome(ret, None, RequestKind.LINEAR)

    def _from_latlon(self, tf: StampedTransform, ret: PoseStamped) -> TransformOutcome:
        kind = RequestKind.FROM_LATLON
        try:
            utm_x, utm_y, _ = lat_lon_to_utm(ret.pose.position.x, ret.pose.position.y)
        except ValueError as e:
            log_throttled(logger, logging.WARNING, self._throttle_period,
                          f"[{self._node_name}]: Transformer: cannot convert latlon to UTM: {e}",
                          limiter=self._limiter)
            return TransformOutcome.failure(TransformError.LOOKUP_FAILURE, kind)

        # utm_x, utm_y 位于 '<prefix>/utm_origin'
        utm_frame = self.utm_frame_for(tf.from_frame)
        ret.header.frame_id = utm_frame
        ret.pose.position.x = utm_x
        ret.pose.position.y = utm_y

        utm_to_end = self._lookup.get_transform(utm_frame, tf.to_frame, ret.header.stamp)
        if utm_to_end is None:
            return TransformOutcome.failure(TransformError.LOOKUP_FAILURE, kind)
        if ret.header.frame_id == utm_to_end.to_frame:
            return TransformOutcome(ret, None, kind)

        outcome = self._linear(utm_to_end, ret)
        outcome.kind = kind
        return outcome

    def _to_latlon(self, tf: StampedTransform, ret: PoseStamped) -> TransformOutcome:
        kind = RequestKind.TO_LATLON
        zone, present = self._utm_zone.get()
        if not present:
            log_throttled(logger, logging.WARNING, self._throttle_period,
                          f"[{self._node_name}]: cannot transform to latlong, missing UTM zone "
                          f"(did you call set_current_lat_lon()?)",
                          limiter=self._limiter)
            return TransformOutcome.failure(TransformError.MISSING_UTM_ZONE, kind)

        utm_frame = self.utm_frame_for(tf.to_frame)
        start_to_utm = self._lookup.get_transform(tf.from_frame, utm_frame, ret.header.stamp)
        if start_to_utm is None:
            return TransformOutcome.failure(TransformError.LOOKUP_FAILURE, kind)

        if ret.header.frame_id != utm_frame:
            intermediate = self._linear(start_to_utm, ret)
            if not intermediate.ok:
                return TransformOutcome.failure(TransformError.LOOKUP_FAILURE, kind)
            ret = intermediate.pose

        lat, lon = utm_to_lat_lon(ret.pose.position.x, ret.pose.position.y, zone)
        ret.pose.position.x = lat
        ret.pose.position.y = lon
        ret.header.frame_id = tf.to_frame
        return TransformOutcome(ret, None, kind)

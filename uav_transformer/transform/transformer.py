"""
坐标变换器

对外接口：坐标系名解析、变换查询、位姿/参考点变换、经纬度锚点设置。

状态:
- 已初始化：持有 TF 缓存和后台监听器；shutdown()、with 块结束或对象被回收时停止监听线程
- 未初始化 (无参构造)：拒绝所有请求，节流输出错误日志

线程模型:
- 任意线程可以并发调用
- 三把独立的锁：控制坐标系、UTM 区、TF 缓存句柄，均为短时持有
- TF 查询本身不在任何锁内进行
"""
from typing import Any, Dict, Optional, Union
import logging
import weakref

from ..compat.ros_compat_core import (
    StandaloneTF2Buffer, StandaloneTransformListener,
    euler_from_quaternion, quaternion_from_euler
)
from ..config.default_config import get_config_value, validate_config
from ..core.constants import DEFAULT_NAMESPACE_TOKEN, LATEST_TIME
from ..core.data_types import (
    Header, Point3D, Pose, PoseStamped, Quaternion, Reference, ReferenceStamped
)
from ..core.enums import TransformError
from ..core.throttle import RateLimiter, log_throttled
from .composition import TransformCompositionEngine, TransformOutcome, TransformRequest
from .frame_resolver import FrameNameResolver
from .geodetic import UTMZone
from .registries import ControlFrameRegistry, UTMZoneRegistry
from .stamped_transform import StampedTransform
from .tf_lookup import TransformLookup

logger = logging.getLogger(__name__)

Stamped = Union[PoseStamped, ReferenceStamped]


class Transformer:
    """
    坐标变换器

    使用方法:
        transformer = Transformer('planner', uav_name='uav1')
        transformer.set_current_control_frame('uav1/fcu')

        tf = transformer.get_transform('fcu', 'world', stamp)
        if tf is not None:
            pose_world = transformer.transform(tf, pose)

        pose_world = transformer.transform_single('world', pose)
    """

    def __init__(self, node_name: Optional[str] = None, uav_name: str = '', cache_timeout: float = 0.0,
                 namespace_token: str = DEFAULT_NAMESPACE_TOKEN, throttle_period: float = 1.0,
                 buffer_cache_time: float = 10.0, max_chain_depth: int = 10):
        """
        Args:
            node_name: 节点名；为 None 时构造未初始化的变换器
            uav_name: 机载命名空间，为空时裸坐标系名不加前缀
            cache_timeout: 最新可用变换的最大年龄 (秒)，0 表示不检查
            namespace_token: 命名空间标记
            throttle_period: 节流日志周期 (秒)
            buffer_cache_time: TF 缓存时长 (秒)
            max_chain_depth: 链式查找最大跳数
        """
        self._is_initialized = node_name is not None
        self._node_name = node_name or ''
        self._uav_name = uav_name or ''
        self._cache_timeout = cache_timeout
        self._namespace_token = namespace_token
        self._throttle_period = throttle_period
        self._buffer_cache_time = buffer_cache_time
        self._max_chain_depth = max_chain_depth

        self._limiter = RateLimiter()
        self._control_frame = ControlFrameRegistry()
        self._utm_zone = UTMZoneRegistry()

        self._resolver = FrameNameResolver(
            self._control_frame, self._uav_name, self._node_name, namespace_token,
            throttle_period, self._limiter)

        self._listener: Optional[StandaloneTransformListener] = None
        self._finalizer: Optional[weakref.finalize] = None
        buffer = None
        if self._is_initialized:
            buffer = StandaloneTF2Buffer(buffer_cache_time, max_chain_depth)
            self._listener = StandaloneTransformListener(buffer, self._node_name)
            # 变换器被回收时停止监听线程；回调只持有监听器，不持有 self
            self._finalizer = weakref.finalize(self, self._listener.stop)

        self._lookup = TransformLookup(
            self._resolver, buffer, self._node_name, cache_timeout, throttle_period, self._limiter)
        self._engine = TransformCompositionEngine(
            self._resolver, self._lookup, self._utm_zone, self._node_name, throttle_period, self._limiter)

        if self._is_initialized and not self._uav_name:
            logger.warning(f"[{self._node_name}]: Transformer: no uav_name given, bare frame names will not be namespaced")

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> 'Transformer':
        """从配置字典构造 (缺失项使用 DEFAULT_CONFIG)"""
        validate_config(config, raise_on_error=True)
        return cls(
            node_name=get_config_value(config, 'transformer.node_name'),
            uav_name=get_config_value(config, 'transformer.uav_name'),
            cache_timeout=get_config_value(config, 'transformer.cache_timeout'),
            namespace_token=get_config_value(config, 'transformer.namespace_token'),
            throttle_period=get_config_value(config, 'transformer.throttle_period'),
            buffer_cache_time=get_config_value(config, 'tf_buffer.cache_time'),
            max_chain_depth=get_config_value(config, 'tf_buffer.max_chain_depth'),
        )

    # ------------------------------------------------------------------ 属性

    @property
    def is_initialized(self) -> bool:
        return self._is_initialized

    @property
    def node_name(self) -> str:
        return self._node_name

    @property
    def uav_name(self) -> str:
        return self._uav_name

    @property
    def cache_timeout(self) -> float:
        return self._cache_timeout

    @property
    def buffer(self) -> Optional[StandaloneTF2Buffer]:
        return self._lookup.buffer

    @property
    def listener(self) -> Optional[StandaloneTransformListener]:
        return self._listener

    @property
    def current_control_frame(self) -> Optional[str]:
        frame, present = self._control_frame.get()
        return frame if present else None

    @property
    def current_utm_zone(self) -> Optional[UTMZone]:
        zone, present = self._utm_zone.get()
        return zone if present else None

    # ------------------------------------------------------------------ 坐标系名

    def resolve_frame_name(self, name: str) -> str:
        return self._resolver.resolve(name)

    def get_uav_frame_prefix(self, name: str) -> str:
        return self._resolver.get_namespace_prefix(name)

    def set_current_control_frame(self, frame_id: str) -> None:
        self._control_frame.set(frame_id)

    def set_current_lat_lon(self, lat: float, lon: float) -> UTMZone:
        """设置当前经纬度锚点，确定 UTM -> 经纬度逆投影所用的 UTM 区"""
        return self._utm_zone.set_from_lat_lon(lat, lon)

    # ------------------------------------------------------------------ 变换

    def _check_initialized(self) -> bool:
        if self._is_initialized:
            return True
        log_throttled(logger, logging.ERROR, self._throttle_period,
                      "Transformer: cannot provide transform, not initialized",
                      limiter=self._limiter)
        return False

    def get_transform(self, from_frame: str, to_frame: str,
                      stamp: float = LATEST_TIME) -> Optional[StampedTransform]:
        """
        获取 from_frame -> to_frame 的变换

        先查询 stamp 时刻，失败后查询最新可用变换。

        Returns:
            StampedTransform 或 None
        """
        if not self._check_initialized():
            return None
        return self._lookup.get_transform(from_frame, to_frame, stamp)

    def transform(self, tf: StampedTransform, what: Stamped) -> Optional[Stamped]:
        """用已获取的变换变换位姿或参考点"""
        if not self._check_initialized():
            return None
        if isinstance(what, ReferenceStamped):
            result = self._engine.apply(tf, self.prepare_message(what))
            return None if result is None else self.postprocess_message(result)
        return self._engine.apply(tf, what)

    def transform_single(self, to_frame: str, what: Stamped) -> Optional[Stamped]:
        """把位姿或参考点变换到 to_frame，源坐标系和时间取自消息头"""
        if not self._check_initialized():
            return None
        if isinstance(what, ReferenceStamped):
            result = self._engine.compose(TransformRequest.from_pose_stamped(self.prepare_message(what), to_frame))
            return None if result is None else self.postprocess_message(result)
        return self._engine.compose(TransformRequest.from_pose_stamped(what, to_frame))

    def request(self, request: TransformRequest) -> Optional[PoseStamped]:
        return self.request_outcome(request).pose

    def request_outcome(self, request: TransformRequest) -> TransformOutcome:
        """与 request() 相同，但返回失败分类"""
        if not self._check_initialized():
            return TransformOutcome.failure(TransformError.NOT_INITIALIZED)
        return self._engine.compose_outcome(request)

    # ------------------------------------------------------------------ 参考点

    @staticmethod
    def prepare_message(what: ReferenceStamped) -> PoseStamped:
        """参考点 -> 位姿，航向角转为绕 z 轴的四元数"""
        q = quaternion_from_euler(0.0, 0.0, what.reference.heading)
        return PoseStamped(
            header=Header(stamp=what.header.stamp, frame_id=what.header.frame_id),
            pose=Pose(
                position=Point3D(what.reference.position.x, what.reference.position.y, what.reference.position.z),
                orientation=Quaternion.from_tuple(q)
            )
        )

    @staticmethod
    def postprocess_message(what: PoseStamped) -> ReferenceStamped:
        """位姿 -> 参考点，从四元数中提取航向角"""
        _, _, yaw = euler_from_quaternion(what.pose.orientation.to_tuple())
        return ReferenceStamped(
            header=Header(stamp=what.header.stamp, frame_id=what.header.frame_id),
            reference=Reference(
                position=Point3D(what.pose.position.x, what.pose.position.y, what.pose.position.z),
                heading=yaw
            )
        )

    # ------------------------------------------------------------------ 生命周期

    def snapshot(self, share_buffer: bool = False) -> 'Transformer':
        """
        复制变换器

        控制坐标系和 UTM 区在各自的锁内复制；新的 TF 缓存和监听器在锁外创建。
        share_buffer=True 时副本与本实例读取同一个 TF 缓存。
        """
        clone = Transformer(
            node_name=self._node_name if self._is_initialized else None,
            uav_name=self._uav_name,
            cache_timeout=self._cache_timeout,
            namespace_token=self._namespace_token,
            throttle_period=self._throttle_period,
            buffer_cache_time=self._buffer_cache_time,
            max_chain_depth=self._max_chain_depth,
        )
        clone._control_frame.copy_from(self._control_frame)
        clone._utm_zone.copy_from(self._utm_zone)

        if share_buffer and self._is_initialized:
            clone.shutdown()
            clone._lookup.replace_buffer(self._lookup.buffer)
        return clone

    def shutdown(self) -> None:
        """停止后台监听线程 (未调用时在变换器被回收后自动停止)"""
        if self._finalizer is not None:
            self._finalizer()
            self._finalizer = None
        self._listener = None

    def __enter__(self) -> 'Transformer':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.shutdown()

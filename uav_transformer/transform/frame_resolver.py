"""
坐标系名称解析

规则 (namespace_token = 'uav', uav_name = 'uav1'):
- ''           -> 当前控制坐标系；未设置时警告并返回 ''
- 'fcu'        -> 'uav1/fcu'；未配置 uav_name 时警告并原样返回
- 'uav1/fcu'   -> 'uav1/fcu' (幂等)
"""
from typing import Optional
import logging

from ..core.constants import DEFAULT_NAMESPACE_TOKEN, FRAME_SEPARATOR
from ..core.throttle import RateLimiter, log_throttled
from .registries import ControlFrameRegistry

logger = logging.getLogger(__name__)


class FrameNameResolver:
    """把可能为空、可能不带命名空间的坐标系名解析为完整坐标系名"""

    def __init__(self, control_frame: ControlFrameRegistry, uav_name: str = '',
                 node_name: str = '', namespace_token: str = DEFAULT_NAMESPACE_TOKEN,
                 throttle_period: float = 1.0, limiter: Optional[RateLimiter] = None):
        self._control_frame = control_frame
        self._uav_name = uav_name or ''
        self._node_name = node_name
        self._namespace_token = namespace_token
        self._throttle_period = throttle_period
        self._limiter = limiter or RateLimiter()

    @property
    def uav_name(self) -> str:
        return self._uav_name

    @property
    def has_uav_name(self) -> bool:
        return bool(self._uav_name)

    @property
    def namespace_token(self) -> str:
        return self._namespace_token

    def is_namespaced(self, name: str) -> bool:
        if self._uav_name and name.startswith(self._uav_name + FRAME_SEPARATOR):
            return True
        return name.startswith(self._namespace_token)

    def lacks_namespace(self, name: str) -> bool:
        """裸坐标系名且未配置 uav_name，resolve() 会原样返回"""
        return bool(name) and not self._uav_name and not self.is_namespaced(name)

    def resolve(self, name: str) -> str:
        """
        解析坐标系名

        Returns:
            完整坐标系名；空字符串表示无法解析 (缺少控制坐标系)，调用方不得使用
        """
        if not name:
            frame, present = self._control_frame.get()
            if present:
                return frame
            log_throttled(
                logger, logging.WARNING, self._throttle_period,
                f"[{self._node_name}]: Transformer: could not resolve an empty frame_id, missing the current "
                f"control frame (are you calling set_current_control_frame()?)",
                limiter=self._limiter)
            return ''

        if not self.is_namespaced(name):
            if self._uav_name:
                return self._uav_name + FRAME_SEPARATOR + name
            log_throttled(
                logger, logging.WARNING, self._throttle_period,
                f"[{self._node_name}]: Transformer: could not deduce a namespaced frame_id '{name}' "
                f"(did you instance the Transformer with the uav_name argument?)",
                limiter=self._limiter)

        return name

    def get_namespace_prefix(self, name: str) -> str:
        """
        提取命名空间前缀

        'uav1/world' -> 'uav1'，'uav1' -> 'uav1'，'world' -> ''
        """
        if self._uav_name and name.startswith(self._uav_name + FRAME_SEPARATOR):
            return self._uav_name
        if not name.startswith(self._namespace_token):
            return ''
        slash = name.find(FRAME_SEPARATOR, len(self._namespace_token))
        if slash < 0:
            return name
        return name[:slash]

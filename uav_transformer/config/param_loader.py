"""
参数加载器

从 YAML 文件或字典加载 Transformer 配置。

与 ROS 参数服务器的约定一致：参数名使用 '/' 或 '.' 分隔的路径，
例如 'transformer/uav_name' 或 'transformer.uav_name'。

必需参数缺失时不使用全局标志，而是记录在每次加载返回的 LoadResult 中，
由调用方决定是否继续。
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple
import logging

import yaml

from .default_config import DEFAULT_CONFIG, validate_config
from .utils import merged_with_defaults

logger = logging.getLogger(__name__)

_MISSING = object()


@dataclass
class LoadResult:
    """一次参数加载的结果"""
    loaded: Dict[str, Any] = field(default_factory=dict)
    missing_compulsory: List[str] = field(default_factory=list)
    validation_errors: List[Tuple[str, str]] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.missing_compulsory and not self.validation_errors


class ParamLoader:
    """
    参数加载器

    使用方法:
        loader = ParamLoader.from_yaml('transformer.yaml', node_name='planner')
        uav_name = loader.load_param('transformer/uav_name', optional=False)
        if not loader.result.success:
            ...
    """

    def __init__(self, params: Optional[Dict[str, Any]] = None, node_name: str = '',
                 print_values: bool = True):
        self._params = params or {}
        self._node_name = node_name
        self._print_values = print_values
        self._result = LoadResult()

    @classmethod
    def from_yaml(cls, path: str, node_name: str = '', print_values: bool = True) -> 'ParamLoader':
        with open(path, 'r', encoding='utf-8') as f:
            params = yaml.safe_load(f) or {}
        if not isinstance(params, dict):
            raise ValueError(f"Parameter file '{path}' must contain a mapping, got {type(params).__name__}")
        return cls(params, node_name=node_name, print_values=print_values)

    @property
    def result(self) -> LoadResult:
        return self._result

    def _prefix(self) -> str:
        return f"[{self._node_name}]: " if self._node_name else ""

    def _lookup(self, name: str) -> Any:
        value = self._params
        for key in name.replace('.', '/').strip('/').split('/'):
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return _MISSING
        return value

    def load_param(self, name: str, default: Any = None, optional: bool = True) -> Any:
        """
        加载单个参数

        Args:
            name: 参数路径
            default: 缺失时的默认值
            optional: False 时缺失会记录到 result.missing_compulsory 并输出错误日志

        Returns:
            参数值或默认值
        """
        value = self._lookup(name)
        if value is _MISSING:
            if not optional:
                logger.error(f"{self._prefix()}Could not load non-optional parameter {name}")
                self._result.missing_compulsory.append(name)
            value = default
        if self._print_values:
            logger.info(f"{self._prefix()}parameter '{name}':\t{value}")
        self._result.loaded[name] = value
        return value

    def load_config(self, compulsory: Tuple[str, ...] = ()) -> Tuple[Dict[str, Any], LoadResult]:
        """
        加载完整配置并与 DEFAULT_CONFIG 合并

        Args:
            compulsory: 必须出现在参数源中的参数路径

        Returns:
            (配置字典, 本次加载结果)
        """
        for name in compulsory:
            self.load_param(name, optional=False)

        overrides = {}
        for section, defaults in DEFAULT_CONFIG.items():
            section_values = {}
            for key in defaults:
                value = self._lookup(f"{section}/{key}")
                if value is not _MISSING:
                    section_values[key] = value
            if section_values:
                overrides[section] = section_values

        config = merged_with_defaults(DEFAULT_CONFIG, overrides)
        self._result.validation_errors = validate_config(config, raise_on_error=False)
        return config, self._result

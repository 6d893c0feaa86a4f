"""配置模块

提供统一的配置接口，支持：
- 默认配置 (DEFAULT_CONFIG)
- 配置验证 (validate_config)
- 参数加载 (ParamLoader，YAML / 字典)

使用示例:
    from uav_transformer.config import DEFAULT_CONFIG, validate_config

    config = copy.deepcopy(DEFAULT_CONFIG)
    config['transformer']['uav_name'] = 'uav1'
    errors = validate_config(config, raise_on_error=False)
"""

from .default_config import (
    DEFAULT_CONFIG,
    CONFIG_VALIDATION_RULES,
    ConfigValidationError,
    get_config_value,
    validate_config,
)
from .transformer_config import TRANSFORMER_CONFIG, TF_BUFFER_CONFIG
from .param_loader import ParamLoader, LoadResult
from .utils import deep_update

__all__ = [
    'DEFAULT_CONFIG',
    'CONFIG_VALIDATION_RULES',
    'ConfigValidationError',
    'get_config_value',
    'validate_config',
    'TRANSFORMER_CONFIG',
    'TF_BUFFER_CONFIG',
    'ParamLoader',
    'LoadResult',
    'deep_update',
]

"""默认配置与配置验证"""
from typing import Any, Dict, List, Tuple
import logging

from .transformer_config import (
    TRANSFORMER_CONFIG, TF_BUFFER_CONFIG, TRANSFORMER_VALIDATION_RULES
)

logger = logging.getLogger(__name__)


DEFAULT_CONFIG = {
    'transformer': TRANSFORMER_CONFIG,
    'tf_buffer': TF_BUFFER_CONFIG,
}

CONFIG_VALIDATION_RULES = {
    **TRANSFORMER_VALIDATION_RULES,
}

# 字符串字段: (路径, 是否允许为空)
_STRING_FIELDS = [
    ('transformer.node_name', False),
    ('transformer.uav_name', True),
    ('transformer.namespace_token', False),
]


class ConfigValidationError(ValueError):
    """配置验证失败"""
    pass


def get_config_value(config: Dict[str, Any], key_path: str, default: Any = None) -> Any:
    """从配置字典中获取值，支持点分隔的路径；缺失时回退到 DEFAULT_CONFIG"""
    keys = key_path.split('.')
    value = config
    for key in keys:
        if isinstance(value, dict) and key in value:
            value = value[key]
        else:
            default_value = DEFAULT_CONFIG
            for k in keys:
                if isinstance(default_value, dict) and k in default_value:
                    default_value = default_value[k]
                else:
                    return default
            return default_value
    return value


def validate_config(config: Dict[str, Any], raise_on_error: bool = True) -> List[Tuple[str, str]]:
    """
    验证配置

    Args:
        config: 配置字典
        raise_on_error: 有错误时是否抛出 ConfigValidationError

    Returns:
        错误列表 [(key_path, message), ...]

    Raises:
        ConfigValidationError: raise_on_error=True 且存在错误
    """
    errors: List[Tuple[str, str]] = []

    for key_path, (min_val, max_val, desc) in CONFIG_VALIDATION_RULES.items():
        value = get_config_value(config, key_path)
        if value is None:
            continue
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            errors.append((key_path, f'{desc} 必须是数值，当前为 {type(value).__name__}'))
            continue
        if min_val is not None and value < min_val:
            errors.append((key_path, f'{desc} 值 {value} 小于最小值 {min_val}'))
        if max_val is not None and value > max_val:
            errors.append((key_path, f'{desc} 值 {value} 大于最大值 {max_val}'))

    for key_path, allow_empty in _STRING_FIELDS:
        value = get_config_value(config, key_path)
        if not isinstance(value, str):
            errors.append((key_path, f'必须是字符串，当前为 {type(value).__name__}'))
        elif not allow_empty and not value:
            errors.append((key_path, '不能为空'))

    uav_name = get_config_value(config, 'transformer.uav_name')
    if isinstance(uav_name, str) and uav_name.endswith('/'):
        errors.append(('transformer.uav_name', f"不能以 '/' 结尾: '{uav_name}'"))

    if errors and raise_on_error:
        msg = '; '.join(f'{key}: {message}' for key, message in errors)
        raise ConfigValidationError(f'Invalid configuration: {msg}')

    if errors:
        for key, message in errors:
            logger.warning(f"Config validation: {key}: {message}")
    return errors

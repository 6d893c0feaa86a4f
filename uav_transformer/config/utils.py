"""配置字典合并"""
from typing import Any, Dict
import collections.abc
import copy


def deep_update(source: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """
    把 overrides 递归合并进 source (原地修改并返回 source)

    嵌套的配置段逐键合并；非字典值或空字典直接覆盖。
    """
    for key, value in overrides.items():
        current = source.get(key)
        if isinstance(value, collections.abc.Mapping) and value:
            if not isinstance(current, collections.abc.Mapping):
                current = {}
            source[key] = deep_update(dict(current), value)
        else:
            source[key] = value
    return source


def merged_with_defaults(defaults: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """defaults 的深拷贝合并 overrides，两个输入都不被修改"""
    return deep_update(copy.deepcopy(defaults), overrides or {})

"""枚举类型定义"""
from enum import Enum, auto


class TransformError(Enum):
    """
    变换请求失败的分类

    所有类型对进程都是非致命的，在请求接口处统一表现为 None，
    并输出对应级别的日志。
    """
    MISSING_CONTROL_FRAME = auto()      # 空坐标系名，但从未设置当前控制坐标系
    MISSING_VEHICLE_NAMESPACE = auto()  # 裸坐标系名，但未配置 uav_name (不致命，记入 TransformOutcome.warnings)
    MISSING_UTM_ZONE = auto()           # 目标为经纬度坐标系，但从未设置 UTM 区
    LOOKUP_FAILURE = auto()             # 精确时间和最新可用两次查询均失败
    NOT_INITIALIZED = auto()            # 变换器未初始化


class RequestKind(Enum):
    """变换请求的分类 (按检查顺序)"""
    IDENTITY = auto()
    FROM_LATLON = auto()
    TO_LATLON = auto()
    LINEAR = auto()

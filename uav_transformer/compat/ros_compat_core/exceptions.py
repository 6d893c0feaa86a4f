"""
TF2 异常类型 (独立运行模式)

与 tf2 的异常层次保持一致，调用方可以统一捕获 TransformException。
"""


class TransformException(Exception):
    """TF2 变换异常基类"""
    pass


class LookupException(TransformException):
    """TF2 查找异常 - 找不到指定的坐标系"""
    pass


class ExtrapolationException(TransformException):
    """TF2 外推异常 - 请求的时间超出缓存范围"""
    pass


class ConnectivityException(TransformException):
    """TF2 连接异常 - 坐标系之间没有连接路径"""
    pass

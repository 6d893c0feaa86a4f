"""坐标变换器配置

Transformer 构造时读取的参数：
- 节点名 (日志前缀，监听器线程名)
- 机载命名空间 (uav_name)，为空时裸坐标系名不加前缀
- 缓存超时：最新可用变换的最大允许年龄，0 表示不检查

命名约定示例 (uav_name = 'uav1'):

    'fcu'            ->  'uav1/fcu'
    'uav1/fcu'       ->  'uav1/fcu'      (已带命名空间，保持不变)
    ''               ->  当前控制坐标系  (setCurrentControlFrame)
    'latlon_origin'  ->  'uav1/latlon_origin' (经纬度伪坐标系，需要非线性投影)
"""

# 坐标变换器配置
TRANSFORMER_CONFIG = {
    'node_name': 'transformer',      # 节点名
    'uav_name': '',                  # 机载命名空间，例如 'uav1'
    'cache_timeout': 0.0,            # 最新可用变换的最大年龄 (秒)，0 = 不检查
    'namespace_token': 'uav',        # 命名空间标记
    'throttle_period': 1.0,          # 节流日志周期 (秒)
}

# TF 缓存配置
TF_BUFFER_CONFIG = {
    'cache_time': 10.0,              # 每条边保留的历史时长 (秒)
    'max_chain_depth': 10,           # 链式查找最大跳数
}

# 坐标变换配置验证规则
TRANSFORMER_VALIDATION_RULES = {
    'transformer.cache_timeout': (0.0, 60.0, '缓存超时 (秒)'),
    'transformer.throttle_period': (0.0, 60.0, '节流日志周期 (秒)'),
    'tf_buffer.cache_time': (0.1, 3600.0, 'TF 缓存时长 (秒)'),
    'tf_buffer.max_chain_depth': (1, 100, '链式查找最大跳数'),
}

__all__ = [
    'TRANSFORMER_CONFIG',
    'TF_BUFFER_CONFIG',
    'TRANSFORMER_VALIDATION_RULES',
]

"""
通用常量定义

本模块只包含不需要配置的常量：
- 坐标系命名约定 (经纬度伪坐标系、UTM 原点坐标系)
- 时间哨兵值
- 数值稳定性常量

可调参数 (超时、节流周期、缓存时长等) 放在 config/*.py 中。
"""

# =============================================================================
# 坐标系命名约定
# =============================================================================

# 经纬度伪坐标系，无法通过线性变换到达
LATLON_ORIGIN = 'latlon_origin'

# 经纬度坐标经过 UTM 投影后所在的平面坐标系 (带命名空间前缀)
UTM_ORIGIN = 'utm_origin'

# 机载命名空间标记 (例如 uav1/fcu)
DEFAULT_NAMESPACE_TOKEN = 'uav'

# 命名空间分隔符
FRAME_SEPARATOR = '/'

# =============================================================================
# 时间
# =============================================================================

# 查询 "最新可用" 变换的时间哨兵 (对应 ros::Time(0))
LATEST_TIME = 0.0

# =============================================================================
# 数值稳定性
# =============================================================================

EPSILON = 1e-6
QUATERNION_NORM_SQ_MIN = 1e-10

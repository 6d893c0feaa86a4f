"""
经纬度 <-> UTM 转换

无状态的纯函数，投影计算交给 pyproj (WGS84 / UTM, EPSG:326xx / 327xx)。
区号按标准 UTM 划分，包含挪威 (32V) 和斯瓦尔巴群岛 (31X/33X/35X/37X) 的例外。

坐标约定:
- 经纬度单位为度
- UTM 坐标 x = easting，y = northing，单位为米
"""
from dataclasses import dataclass
from functools import lru_cache
from typing import Tuple

import pyproj

# 纬度带字母，每带 8 度，从 -80 度开始；X 带覆盖 72 ~ 84 度
_LATITUDE_BANDS = 'CDEFGHJKLMNPQRSTUVWX'
MIN_LATITUDE = -80.0
MAX_LATITUDE = 84.0


@dataclass(frozen=True)
class UTMZone:
    """UTM 区 (区号 + 纬度带字母)，例如 33U"""
    number: int
    letter: str

    @property
    def is_northern(self) -> bool:
        return self.letter >= 'N'

    @property
    def epsg(self) -> int:
        return (32600 if self.is_northern else 32700) + self.number

    def __str__(self) -> str:
        return f"{self.number}{self.letter}"

    @classmethod
    def parse(cls, text: str) -> 'UTMZone':
        """从 '33U' 形式的字符串解析"""
        text = text.strip().upper()
        number, letter = text[:-1], text[-1:]
        if not number.isdigit() or letter not in _LATITUDE_BANDS:
            raise ValueError(f"Invalid UTM zone '{text}'")
        zone = cls(int(number), letter)
        if not 1 <= zone.number <= 60:
            raise ValueError(f"Invalid UTM zone number {zone.number}")
        return zone


def _normalize_longitude(lon: float) -> float:
    return (lon + 180.0) % 360.0 - 180.0


def _latitude_band(lat: float) -> str:
    if not MIN_LATITUDE <= lat <= MAX_LATITUDE:
        raise ValueError(f"Latitude {lat} is outside the UTM limits [{MIN_LATITUDE}, {MAX_LATITUDE}]")
    return _LATITUDE_BANDS[min(int((lat - MIN_LATITUDE) // 8), len(_LATITUDE_BANDS) - 1)]


def utm_zone_for(lat: float, lon: float) -> UTMZone:
    """计算经纬度所在的 UTM 区"""
    lon = _normalize_longitude(lon)
    letter = _latitude_band(lat)
    number = int((lon + 180.0) // 6) + 1

    # 挪威西南部
    if 56.0 <= lat < 64.0 and 3.0 <= lon < 12.0:
        number = 32

    # 斯瓦尔巴群岛
    if 72.0 <= lat < 84.0:
        if 0.0 <= lon < 9.0:
            number = 31
        elif 9.0 <= lon < 21.0:
            number = 33
        elif 21.0 <= lon < 33.0:
            number = 35
        elif 33.0 <= lon < 42.0:
            number = 37

    return UTMZone(min(number, 60), letter)


@lru_cache(maxsize=64)
def _projections(epsg: int) -> Tuple[pyproj.Transformer, pyproj.Transformer]:
    forward = pyproj.Transformer.from_crs("EPSG:4326", f"EPSG:{epsg}", always_xy=True)
    inverse = pyproj.Transformer.from_crs(f"EPSG:{epsg}", "EPSG:4326", always_xy=True)
    return forward, inverse


def lat_lon_to_utm(lat: float, lon: float) -> Tuple[float, float, UTMZone]:
    """
    经纬度转 UTM

    Returns:
        (easting, northing, zone)

    Raises:
        ValueError: 纬度超出 UTM 范围
    """
    zone = utm_zone_for(lat, lon)
    forward, _ = _projections(zone.epsg)
    easting, northing = forward.transform(_normalize_longitude(lon), lat)
    return float(easting), float(northing), zone


def utm_to_lat_lon(easting: float, northing: float, zone: UTMZone) -> Tuple[float, float]:
    """
    UTM 转经纬度

    Returns:
        (lat, lon)
    """
    _, inverse = _projections(zone.epsg)
    lon, lat = inverse.transform(easting, northing)
    return float(lat), float(lon)

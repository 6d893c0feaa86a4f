"""坐标变换模块"""
from .composition import TransformCompositionEngine, TransformOutcome, TransformRequest
from .frame_resolver import FrameNameResolver
from .geodetic import UTMZone, lat_lon_to_utm, utm_to_lat_lon, utm_zone_for
from .registries import ControlFrameRegistry, UTMZoneRegistry
from .stamped_transform import StampedTransform
from .tf_lookup import TransformLookup
from .transformer import Transformer

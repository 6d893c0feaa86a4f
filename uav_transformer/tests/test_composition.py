"""变换组合引擎测试"""
from unittest.mock import MagicMock

import numpy as np
import pytest

from uav_transformer.compat.ros_compat_core import StandaloneTF2Buffer
from uav_transformer.core.data_types import Point3D, Pose
from uav_transformer.core.enums import RequestKind, TransformError
from uav_transformer.transform.composition import TransformCompositionEngine, TransformRequest
from uav_transformer.transform.frame_resolver import FrameNameResolver
from uav_transformer.transform.geodetic import lat_lon_to_utm, utm_to_lat_lon
from uav_transformer.transform.registries import ControlFrameRegistry, UTMZoneRegistry
from uav_transformer.transform.stamped_transform import StampedTransform
from uav_transformer.transform.tf_lookup import TransformLookup
from uav_transformer.tests.fixtures import make_pose, make_transform


class _Parts:

    def __init__(self, uav_name='uav1', buffer=None):
        self.control_frame = ControlFrameRegistry()
        self.utm_zone = UTMZoneRegistry()
        self.resolver = FrameNameResolver(self.control_frame, uav_name=uav_name, node_name='test')
        self.buffer = buffer if buffer is not None else StandaloneTF2Buffer()
        self.lookup = TransformLookup(self.resolver, self.buffer, 'test')
        self.engine = TransformCompositionEngine(self.resolver, self.lookup, self.utm_zone, 'test')


@pytest.fixture
def parts():
    return _Parts()


def _pose(x=0.0, y=0.0, z=0.0):
    return Pose(position=Point3D(x, y, z))


class TestNamespaceWarnings:
    """未配置 uav_name 时裸坐标系名原样使用，请求不失败但结果带警告"""

    def test_bare_name_without_uav_name(self):
        parts = _Parts(uav_name='')
        parts.buffer.set_transform(make_transform('world', 'fcu', 1.0, (1.0, 0.0, 0.0)))

        outcome = parts.engine.compose_outcome(TransformRequest('fcu', 'world', 1.0, _pose()))

        assert outcome.ok
        assert outcome.error is None
        assert outcome.pose.header.frame_id == 'world'
        assert outcome.warnings == [TransformError.MISSING_VEHICLE_NAMESPACE]

    def test_namespaced_names_have_no_warning(self):
        parts = _Parts(uav_name='')
        parts.buffer.set_transform(make_transform('uav2/world', 'uav2/fcu', 1.0))
        outcome = parts.engine.compose_outcome(TransformRequest('uav2/fcu', 'uav2/world', 1.0, _pose()))
        assert outcome.ok
        assert outcome.warnings == []

    def test_configured_uav_name_has_no_warning(self, parts):
        parts.buffer.set_transform(make_transform('uav1/world', 'uav1/fcu', 1.0))
        outcome = parts.engine.compose_outcome(TransformRequest('fcu', 'world', 1.0, _pose()))
        assert outcome.warnings == []

    def test_warning_kept_on_failure(self):
        parts = _Parts(uav_name='')
        outcome = parts.engine.compose_outcome(TransformRequest('fcu', 'world', 1.0, _pose()))
        assert outcome.error == TransformError.LOOKUP_FAILURE
        assert outcome.warnings == [TransformError.MISSING_VEHICLE_NAMESPACE]


class TestClassification:

    def test_kinds(self, parts):
        engine = parts.engine
        assert engine.classify('uav1/fcu', 'uav1/fcu') == RequestKind.IDENTITY
        assert engine.classify('uav1/latlon_origin', 'uav1/fcu') == RequestKind.FROM_LATLON
        assert engine.classify('uav1/fcu', 'uav1/latlon_origin') == RequestKind.TO_LATLON
        assert engine.classify('uav1/fcu', 'uav1/world') == RequestKind.LINEAR

    def test_utm_frame_follows_namespace(self, parts):
        assert parts.engine.utm_frame_for('uav1/latlon_origin') == 'uav1/utm_origin'
        assert parts.engine.utm_frame_for('uav3/latlon_origin') == 'uav3/utm_origin'
        assert parts.engine.utm_frame_for('latlon_origin') == 'utm_origin'


class TestIdentity:
    """同一坐标系：只改标签，不访问缓存"""

    @pytest.mark.parametrize('stamp', [0.0, 1.5, 1e9])
    def test_identity_skips_store(self, stamp):
        parts = _Parts()
        parts.engine._lookup = MagicMock(spec=TransformLookup)

        outcome = parts.engine.compose_outcome(TransformRequest('fcu', 'uav1/fcu', stamp, _pose(1.0, 2.0, 3.0)))

        assert outcome.ok
        assert outcome.kind == RequestKind.IDENTITY
        assert outcome.pose.header.frame_id == 'uav1/fcu'
        assert outcome.pose.header.stamp == stamp
        assert np.allclose(outcome.pose.pose.position.to_array(), [1.0, 2.0, 3.0])
        parts.engine._lookup.get_transform.assert_not_called()

    def test_identity_via_control_frame(self, parts):
        parts.control_frame.set('uav1/fcu')
        outcome = parts.engine.compose_outcome(TransformRequest('', 'fcu', 1.0, _pose(1.0)))
        assert outcome.kind == RequestKind.IDENTITY
        assert outcome.pose.header.frame_id == 'uav1/fcu'

    def test_request_pose_not_modified(self, parts):
        pose = _pose(1.0, 2.0, 3.0)
        outcome = parts.engine.compose_outcome(TransformRequest('fcu', 'fcu', 1.0, pose))
        outcome.pose.pose.position.x = 100.0
        assert pose.position.x == 1.0


class TestLinear:

    def test_plain_lookup_and_apply(self, parts):
        parts.buffer.set_transform(make_transform('uav1/world', 'uav1/fcu', 1.0, (10.0, 0.0, 0.0), yaw=np.pi / 2))

        outcome = parts.engine.compose_outcome(TransformRequest('fcu', 'world', 1.0, _pose(1.0, 0.0, 0.0)))

        assert outcome.ok
        assert outcome.kind == RequestKind.LINEAR
        assert outcome.pose.header.frame_id == 'uav1/world'
        assert np.allclose(outcome.pose.pose.position.to_array(), [10.0, 1.0, 0.0], atol=1e-9)

    def test_lookup_failure(self, parts):
        outcome = parts.engine.compose_outcome(TransformRequest('fcu', 'world', 1.0, _pose()))
        assert not outcome.ok
        assert outcome.error == TransformError.LOOKUP_FAILURE

    def test_missing_control_frame(self, parts):
        outcome = parts.engine.compose_outcome(TransformRequest('', 'world', 1.0, _pose()))
        assert outcome.pose is None
        assert outcome.error == TransformError.MISSING_CONTROL_FRAME

    def test_apply_with_pose_already_in_target(self, parts):
        tf = StampedTransform('uav1/fcu', 'uav1/world', 1.0, 1.0, make_transform('uav1/world', 'uav1/fcu', 1.0, (5.0, 0.0, 0.0)))
        result = parts.engine.apply(tf, make_pose('world', (1.0, 0.0, 0.0)))
        assert result.header.frame_id == 'uav1/world'
        assert result.pose.position.x == 1.0

    def test_sentinel_cannot_be_applied_linearly(self, parts):
        tf = StampedTransform.sentinel('uav1/fcu', 'uav1/world', 1.0)
        outcome = parts.engine.apply_outcome(tf, make_pose('fcu'))
        assert outcome.error == TransformError.LOOKUP_FAILURE


class TestFromLatLon:

    def test_converted_then_linear(self, parts):
        x0, y0, _ = lat_lon_to_utm(50.0, 14.4)
        parts.buffer.set_transform(
            make_transform('uav1/fcu', 'uav1/utm_origin', 100.0, (-x0 + 5.0, -y0 - 2.0, 1.0)))

        outcome = parts.engine.compose_outcome(
            TransformRequest('latlon_origin', 'fcu', 100.0, _pose(50.0, 14.4, 3.0)))

        assert outcome.ok
        assert outcome.kind == RequestKind.FROM_LATLON
        assert outcome.pose.header.frame_id == 'uav1/fcu'
        assert np.allclose(outcome.pose.pose.position.to_array(), [5.0, -2.0, 4.0], atol=1e-6)

    def test_into_utm_origin_itself(self, parts):
        x0, y0, _ = lat_lon_to_utm(50.0, 14.4)
        outcome = parts.engine.compose_outcome(
            TransformRequest('latlon_origin', 'utm_origin', 1.0, _pose(50.0, 14.4, 0.0)))

        assert outcome.ok
        assert outcome.pose.header.frame_id == 'uav1/utm_origin'
        assert np.allclose([outcome.pose.pose.position.x, outcome.pose.pose.position.y], [x0, y0])

    def test_linear_leg_missing(self, parts):
        outcome = parts.engine.compose_outcome(
            TransformRequest('latlon_origin', 'fcu', 1.0, _pose(50.0, 14.4)))
        assert outcome.error == TransformError.LOOKUP_FAILURE
        assert outcome.kind == RequestKind.FROM_LATLON

    def test_invalid_latitude(self, parts):
        outcome = parts.engine.compose_outcome(
            TransformRequest('latlon_origin', 'fcu', 1.0, _pose(95.0, 14.4)))
        assert outcome.error == TransformError.LOOKUP_FAILURE


class TestToLatLon:

    def test_missing_zone_never_raises(self, parts):
        parts.buffer.set_transform_static(make_transform('uav1/utm_origin', 'uav1/fcu'))
        for _ in range(5):
            outcome = parts.engine.compose_outcome(TransformRequest('fcu', 'latlon_origin', 1.0, _pose()))
            assert outcome.pose is None
            assert outcome.error == TransformError.MISSING_UTM_ZONE

    def test_nonlinear_step_uses_transformed_coordinates(self, parts):
        x0, y0, zone = lat_lon_to_utm(50.0, 14.4)
        parts.utm_zone.set_from_lat_lon(50.0, 14.4)
        parts.buffer.set_transform_static(make_transform('uav1/utm_origin', 'uav1/fcu', xyz=(x0, y0, 0.0)))

        outcome = parts.engine.compose_outcome(
            TransformRequest('fcu', 'latlon_origin', 1.0, _pose(10.0, -20.0, 2.0)))

        expected_lat, expected_lon = utm_to_lat_lon(x0 + 10.0, y0 - 20.0, zone)
        assert outcome.ok
        assert outcome.kind == RequestKind.TO_LATLON
        assert outcome.pose.header.frame_id == 'uav1/latlon_origin'
        assert outcome.pose.pose.position.x == pytest.approx(expected_lat, abs=1e-9)
        assert outcome.pose.pose.position.y == pytest.approx(expected_lon, abs=1e-9)
        assert outcome.pose.pose.position.z == pytest.approx(2.0)

    def test_from_utm_origin_directly(self, parts):
        x0, y0, _ = lat_lon_to_utm(50.0, 14.4)
        parts.utm_zone.set_from_lat_lon(50.0, 14.4)

        outcome = parts.engine.compose_outcome(
            TransformRequest('utm_origin', 'latlon_origin', 1.0, _pose(x0, y0)))

        assert outcome.ok
        assert outcome.pose.pose.position.x == pytest.approx(50.0, abs=1e-7)
        assert outcome.pose.pose.position.y == pytest.approx(14.4, abs=1e-7)

    def test_linear_leg_missing(self, parts):
        parts.utm_zone.set_from_lat_lon(50.0, 14.4)
        outcome = parts.engine.compose_outcome(TransformRequest('fcu', 'latlon_origin', 1.0, _pose()))
        assert outcome.error == TransformError.LOOKUP_FAILURE
        assert outcome.kind == RequestKind.TO_LATLON


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

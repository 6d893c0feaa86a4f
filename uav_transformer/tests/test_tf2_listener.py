"""TF 监听器测试"""
import threading

import pytest

from uav_transformer.compat.ros_compat_core import StandaloneTF2Buffer, StandaloneTransformListener
from uav_transformer.tests.fixtures import make_transform


@pytest.fixture
def listener():
    listener = StandaloneTransformListener(StandaloneTF2Buffer(), 'test_node')
    yield listener
    listener.stop()


class TestStandaloneTransformListener:

    def test_publish_reaches_buffer(self, listener):
        listener.publish(make_transform('world', 'fcu', 1.0, (1.0, 0.0, 0.0)))
        listener.wait_until_idle()

        assert listener.received_count == 1
        assert listener.buffer.can_transform('world', 'fcu', 1.0)

    def test_publish_many_and_static(self, listener):
        listener.publish([make_transform('odom', 'fcu', float(t)) for t in range(1, 6)])
        listener.publish_static(make_transform('world', 'odom', xyz=(1.0, 0.0, 0.0)))
        listener.wait_until_idle()

        assert listener.received_count == 6
        assert listener.buffer.can_transform('world', 'fcu', 3.5)

    def test_concurrent_producers(self, listener):
        def produce(offset):
            for i in range(50):
                listener.publish(make_transform('world', f'fcu{offset}', float(i + 1)))

        threads = [threading.Thread(target=produce, args=(k,)) for k in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        listener.wait_until_idle()

        assert listener.received_count == 200
        for k in range(4):
            assert listener.buffer.can_transform('world', f'fcu{k}', 25.0)

    def test_stop_and_restart(self, listener):
        listener.stop()
        assert not listener.is_running
        listener.start()
        assert listener.is_running
        listener.publish(make_transform('world', 'fcu', 1.0))
        listener.wait_until_idle()
        assert listener.buffer.has_frame('fcu')

    def test_not_started(self):
        listener = StandaloneTransformListener(StandaloneTF2Buffer(), start=False)
        assert not listener.is_running
        listener.stop()

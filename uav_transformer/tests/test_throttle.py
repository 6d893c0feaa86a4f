"""日志节流测试"""
import logging

from uav_transformer.core.throttle import RateLimiter, log_throttled
from uav_transformer.tests.fixtures import FakeClock

logger = logging.getLogger(__name__)


class TestRateLimiter:

    def test_first_call_emits(self):
        limiter = RateLimiter(clock=FakeClock(10.0))
        assert limiter.should_emit('a', 1.0)

    def test_suppressed_within_period(self):
        clock = FakeClock(10.0)
        limiter = RateLimiter(clock=clock)
        assert limiter.should_emit('a', 1.0)
        clock.advance(0.5)
        assert not limiter.should_emit('a', 1.0)
        clock.advance(0.6)
        assert limiter.should_emit('a', 1.0)

    def test_keys_are_independent(self):
        limiter = RateLimiter(clock=FakeClock(10.0))
        assert limiter.should_emit('a', 1.0)
        assert limiter.should_emit('b', 1.0)
        assert not limiter.should_emit('a', 1.0)

    def test_reset(self):
        limiter = RateLimiter(clock=FakeClock(10.0))
        limiter.should_emit('a', 1.0)
        limiter.reset()
        assert limiter.should_emit('a', 1.0)


class TestLogThrottled:

    def test_keyed_by_call_site(self, caplog):
        limiter = RateLimiter(clock=FakeClock(0.0))
        with caplog.at_level(logging.WARNING):
            for _ in range(3):
                log_throttled(logger, logging.WARNING, 1.0, "site one", limiter=limiter)
            log_throttled(logger, logging.WARNING, 1.0, "site two", limiter=limiter)
        assert caplog.text.count("site one") == 1
        assert caplog.text.count("site two") == 1

    def test_returns_whether_emitted(self):
        limiter = RateLimiter(clock=FakeClock(0.0))
        assert log_throttled(logger, logging.INFO, 1.0, "msg", key='k', limiter=limiter)
        assert not log_throttled(logger, logging.INFO, 1.0, "msg", key='k', limiter=limiter)

    def test_formats_args(self, caplog):
        limiter = RateLimiter(clock=FakeClock(0.0))
        with caplog.at_level(logging.WARNING):
            log_throttled(logger, logging.WARNING, 1.0, "value=%d", 42, limiter=limiter)
        assert "value=42" in caplog.text

    def test_record_points_at_caller(self, caplog):
        limiter = RateLimiter(clock=FakeClock(0.0))
        with caplog.at_level(logging.WARNING):
            log_throttled(logger, logging.WARNING, 1.0, "where am i", limiter=limiter)
        record = caplog.records[-1]
        assert record.filename == 'test_throttle.py'
        assert record.funcName == 'test_record_points_at_caller'

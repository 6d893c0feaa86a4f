"""
tf2_ros.TransformListener 的独立运行实现

模拟 /tf 与 /tf_static 订阅：生产者调用 publish()/publish_static() 入队，
后台线程把变换写入 Buffer。查询方永远不等待这个线程。
"""
from typing import Iterable, Optional, Union
import logging
import queue
import threading

from ...core.data_types import TransformStamped
from .tf2_buffer import StandaloneTF2Buffer

logger = logging.getLogger(__name__)

_STOP = object()


class StandaloneTransformListener:
    """
    独立运行模式下的 TF 监听器

    使用方法:
        buffer = StandaloneTF2Buffer()
        listener = StandaloneTransformListener(buffer, 'my_node')
        listener.publish(transform_stamped)
        listener.wait_until_idle()
        listener.stop()
    """

    def __init__(self, buffer: StandaloneTF2Buffer, node_name: str = '', start: bool = True):
        self._buffer = buffer
        self._node_name = node_name
        self._queue: "queue.Queue" = queue.Queue()
        self._thread: Optional[threading.Thread] = None
        self._received = 0
        if start:
            self.start()

    @property
    def buffer(self) -> StandaloneTF2Buffer:
        return self._buffer

    @property
    def received_count(self) -> int:
        return self._received

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.is_running:
            return
        self._thread = threading.Thread(
            target=self._run, name=f"tf_listener[{self._node_name}]", daemon=True)
        self._thread.start()

    def stop(self, timeout: float = 1.0) -> None:
        if not self.is_running:
            return
        self._queue.put(_STOP)
        if self._thread is not threading.current_thread():
            self._thread.join(timeout)
        self._thread = None

    def publish(self, transforms: Union[TransformStamped, Iterable[TransformStamped]]) -> None:
        """/tf 回调入口"""
        self._enqueue(transforms, static=False)

    def publish_static(self, transforms: Union[TransformStamped, Iterable[TransformStamped]]) -> None:
        """/tf_static 回调入口"""
        self._enqueue(transforms, static=True)

    def wait_until_idle(self) -> None:
        """阻塞直到队列中的变换全部写入 Buffer"""
        self._queue.join()

    def _enqueue(self, transforms, static: bool) -> None:
        if isinstance(transforms, TransformStamped):
            transforms = [transforms]
        for tf in transforms:
            self._queue.put((tf, static))

    def _run(self) -> None:
        while True:
            item = self._queue.get()
            try:
                if item is _STOP:
                    return
                tf, static = item
                authority = self._node_name or 'default'
                if static:
                    self._buffer.set_transform_static(tf, authority)
                else:
                    self._buffer.set_transform(tf, authority)
                self._received += 1
            except Exception as e:
                logger.error(f"[{self._node_name}]: TF listener failed to store transform: {e}")
            finally:
                self._queue.task_done()

"""Цикл записи с синхронизацией (flush loop)"""

import math
import os
import threading
import time
from dataclasses import dataclass, asdict
from typing import BinaryIO, List, Optional

from .errors import PartialWriteError, SyncError, WriteError
from .workloads import WorkloadConfig


@dataclass(frozen=True)
class Sample:
    """Одно измерение цикла write+sync"""
    timestamp: float
    write_duration: float
    sync_duration: float
    bytes_written: int

    @property
    def latency(self) -> float:
        return self.write_duration + self.sync_duration

    @property
    def latency_ms(self) -> float:
        return self.latency * 1000

    def to_dict(self):
        return asdict(self)


def make_block(size: int, fill: int = WorkloadConfig.FILL_BYTE) -> bytes:
    """Блок данных фиксированного размера, заполненный байтом fill"""
    if size <= 0:
        raise ValueError(f"block size must be positive, got {size}")
    return bytes([fill]) * size


def iterations_for(data_size: int, block_size: int) -> int:
    """Число итераций, чтобы записать data_size блоками block_size"""
    if block_size <= 0:
        raise ValueError(f"block size must be positive, got {block_size}")
    if data_size <= 0:
        return 0
    return math.ceil(data_size / block_size)


class FlushLoop:
    """
    Повторяет write(block) + sync(file) до условия остановки:
    число итераций, бюджет времени или внешний сигнал stop_event.
    Ошибка записи или синхронизации прерывает цикл без повторов.
    """

    def __init__(self, handle: BinaryIO, block: bytes,
                 iterations: Optional[int] = None,
                 duration: Optional[float] = None,
                 stop_event: Optional[threading.Event] = None,
                 name: str = "flush"):
        if iterations is None and duration is None and stop_event is None:
            raise ValueError("flush loop needs iterations, duration or stop_event")
        if iterations is not None and iterations < 0:
            raise ValueError(f"iterations must be >= 0, got {iterations}")
        if duration is not None and duration < 0:
            raise ValueError(f"duration must be >= 0, got {duration}")
        if not block:
            raise ValueError("block must not be empty")

        self.handle = handle
        self.block = bytes(block)
        self.iterations = iterations
        self.duration = duration
        self.stop_event = stop_event if stop_event is not None else threading.Event()
        self.name = name
        self.samples: List[Sample] = []
        self.elapsed = 0.0

        self._thread: Optional[threading.Thread] = None
        self._error: Optional[BaseException] = None

    @property
    def block_size(self) -> int:
        return len(self.block)

    @property
    def total_bytes(self) -> int:
        return sum(s.bytes_written for s in self.samples)

    def run(self) -> List[Sample]:
        """Синхронный запуск цикла в текущем потоке"""
        self.samples = []
        started = time.perf_counter()
        step = max(1, self.iterations // 10) if self.iterations else None

        try:
            while not self._should_stop(started):
                number = len(self.samples) + 1
                timestamp = time.time()

                write_start = time.perf_counter()
                self._write(number)
                write_end = time.perf_counter()
                self._sync(number)
                sync_end = time.perf_counter()

                self.samples.append(Sample(
                    timestamp=timestamp,
                    write_duration=write_end - write_start,
                    sync_duration=sync_end - write_end,
                    bytes_written=self.block_size,
                ))

                if step and number % step == 0:
                    print(f"  [{self.name}] Progress: {number}/{self.iterations}")
        finally:
            self.elapsed = time.perf_counter() - started

        return self.samples

    def _should_stop(self, started: float) -> bool:
        if self.stop_event.is_set():
            return True
        if self.iterations is not None and len(self.samples) >= self.iterations:
            return True
        if self.duration is not None and time.perf_counter() - started >= self.duration:
            return True
        return False

    def _write(self, number: int):
        try:
            written = self.handle.write(self.block)
        except OSError as e:
            raise WriteError(number, e) from e
        if written != self.block_size:
            raise PartialWriteError(number, written or 0, self.block_size)

    def _sync(self, number: int):
        try:
            self.handle.flush()
            os.fsync(self.handle.fileno())
        except OSError as e:
            raise SyncError(number, e) from e

    # Запуск в отдельном потоке

    def start(self):
        """Запустить цикл в отдельном потоке"""
        if self._thread is not None:
            raise RuntimeError(f"{self.name} already started")
        self._thread = threading.Thread(
            target=self._run_guarded, name=f"diskio-{self.name}", daemon=True)
        self._thread.start()

    def _run_guarded(self):
        try:
            self.run()
        except BaseException as e:
            self._error = e
            # остановить соседние циклы с общим сигналом
            self.stop_event.set()

    def stop(self):
        """Кооперативная остановка: проверяется между итерациями"""
        self.stop_event.set()

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def join(self, timeout: Optional[float] = None) -> List[Sample]:
        """Дождаться завершения потока; ошибка цикла поднимается здесь"""
        if self._thread is None:
            raise RuntimeError(f"{self.name} was not started")
        self._thread.join(timeout)
        if self._thread.is_alive():
            raise TimeoutError(f"{self.name} did not finish in {timeout}s")
        if self._error is not None:
            raise self._error
        return self.samples

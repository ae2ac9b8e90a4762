"""Бенчмарк записи в файлы на диске: один файл на писателя"""

import threading
import time
from pathlib import Path
from typing import BinaryIO, List, Optional

from .base import FlushLoop, Sample, iterations_for, make_block
from .metrics import FlushResult, humanize, summarize
from .workloads import WorkloadConfig


def data_file_path(directory: Path, writer_id: int) -> Path:
    """Путь к файлу данных писателя"""
    return Path(directory) / f"{WorkloadConfig.FILE_PREFIX}-{writer_id}.data"


def make_data_file(directory: Path, writer_id: int) -> BinaryIO:
    """
    Создать пустой файл данных писателя.
    Старый файл удаляется, новый создается эксклюзивно и без буферизации,
    чтобы write() возвращал фактически записанное число байт.
    """
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)

    file_path = data_file_path(directory, writer_id)
    file_path.unlink(missing_ok=True)

    print(f"  creating file `{file_path}` ..")
    return open(file_path, 'xb', buffering=0)


class FileFlushBenchmark:
    """Бенчмарк write+sync для директории на диске"""

    def __init__(self, directory: str, block_size: int = WorkloadConfig.BLOCK_SIZE,
                 data_size: int = WorkloadConfig.DATA_SIZE,
                 writers: int = WorkloadConfig.WRITERS,
                 duration: Optional[float] = None,
                 keep_files: bool = False):
        if writers < 1:
            raise ValueError(f"writers must be >= 1, got {writers}")
        if data_size < 0:
            raise ValueError(f"data size must be >= 0, got {data_size}")
        if duration is not None and duration < 0:
            raise ValueError(f"duration must be >= 0, got {duration}")

        self.directory = Path(directory)
        self.block = make_block(block_size)
        self.data_size = data_size
        self.writers = writers
        self.duration = duration
        self.keep_files = keep_files
        self.name = f"{writers}x{block_size}x{data_size}"

        self.stop_event = threading.Event()
        self.files: List[BinaryIO] = []
        self.loops: List[FlushLoop] = []

    @property
    def block_size(self) -> int:
        return len(self.block)

    @property
    def iterations_per_writer(self) -> int:
        return iterations_for(self.data_size // self.writers, self.block_size)

    def setup(self):
        """Создание файлов данных и циклов записи"""
        self.stop_event.clear()
        self.files = []
        self.loops = []
        try:
            for i in range(self.writers):
                self.files.append(make_data_file(self.directory, i))

            for i, handle in enumerate(self.files):
                self.loops.append(FlushLoop(
                    handle,
                    self.block,
                    iterations=self.iterations_per_writer,
                    duration=self.duration,
                    stop_event=self.stop_event,
                    name=f"writer-{i}",
                ))
        except Exception:
            self._close_files()
            self.cleanup()
            raise

    def run(self) -> FlushResult:
        """Запуск всех писателей; первая ошибка писателя поднимается после остановки всех"""
        print(f"[{self.directory}] Запуск {self.name}...")

        start_time = time.perf_counter()
        try:
            self.setup()
            for loop in self.loops:
                loop.start()

            runs: List[List[Sample]] = []
            errors = []
            for loop in self.loops:
                try:
                    runs.append(loop.join())
                except BaseException as e:
                    # остальных писателей дожидаемся до повторного raise
                    self.stop_event.set()
                    errors.append(e)
                    runs.append(loop.samples)

            wall_time = time.perf_counter() - start_time
            if errors:
                raise errors[0]
        finally:
            self.stop_event.set()
            self._close_files()
            self.cleanup()

        result = summarize(runs, self.name, self.block_size, self.data_size, wall_time)
        print(f"  wrote {humanize(result.total_bytes)} across {self.writers} writers "
              f"with {self.block_size} block-size in {wall_time:.3f}s")
        return result

    def _close_files(self):
        for handle in self.files:
            handle.close()

    def cleanup(self):
        """Удаление файлов данных"""
        if self.keep_files:
            return
        try:
            for i in range(self.writers):
                data_file_path(self.directory, i).unlink(missing_ok=True)
        except OSError as e:
            print(f"  Cleanup warning: {e}")

"""Конфигурация нагрузки и разбор размеров"""

import os
import re
from dataclasses import dataclass, field
from typing import List, Optional

KB = 1024
MB = 1024 * 1024
GB = 1024 * 1024 * 1024
TB = 1024 * 1024 * 1024 * 1024


class WorkloadConfig:
    """Конфигурация нагрузки"""

    # Размеры по умолчанию
    BLOCK_SIZE = 1 * KB
    DATA_SIZE = 1 * GB
    WRITERS = 1

    # Содержимое блока
    FILL_BYTE = 0xAB

    # Файлы данных
    FILE_PREFIX = "diskio"
    OUTPUT_DIR = "benchmark_results"

    # Лестницы размеров для диапазонов вида "1K..1M"
    BLOCK_SIZES = [
        128,
        256,
        512,
        1 * KB,
        10 * KB,
        100 * KB,
        1 * MB,
        10 * MB,
        100 * MB,
    ]
    DATA_SIZES = [
        1 * MB,
        10 * MB,
        100 * MB,
        1 * GB,
        10 * GB,
        100 * GB,
    ]


_SIZE_RE = re.compile(r"([0-9]+[kKmMgGtT]?)(?:\.\.([0-9]+[kKmMgGtT]?))?")

_UNITS = {
    'k': KB,
    'm': MB,
    'g': GB,
    't': TB,
}


def parse_size(text: str) -> int:
    """Размер с суффиксом K/M/G/T в байтах"""
    text = text.strip()
    if not text:
        raise ValueError("empty size")
    amp = _UNITS.get(text[-1].lower())
    digits = text[:-1] if amp else text
    try:
        return int(digits) * (amp or 1)
    except ValueError:
        raise ValueError(f"invalid size: {text!r}") from None


@dataclass
class SizeRange:
    """Одиночный размер ("1K") или диапазон по лестнице ("1K..1M")"""
    start: int
    end: Optional[int] = None

    @classmethod
    def parse(cls, text: str) -> "SizeRange":
        match = _SIZE_RE.fullmatch(text.strip())
        if match is None:
            raise ValueError(f"invalid size range: {text!r}")
        start = parse_size(match.group(1))
        end = parse_size(match.group(2)) if match.group(2) else None
        return cls(start, end)

    def expand(self, ladder: List[int]) -> List[int]:
        """Значения лестницы в [start, end); одиночный размер - как есть"""
        if self.end is None:
            return [self.start]
        return [x for x in sorted(ladder) if self.start <= x < self.end]

    def blocks(self) -> List[int]:
        return self.expand(WorkloadConfig.BLOCK_SIZES)

    def datas(self) -> List[int]:
        return self.expand(WorkloadConfig.DATA_SIZES)


@dataclass
class Settings:
    """Параметры запуска из окружения"""
    path: str
    block_size: SizeRange = field(
        default_factory=lambda: SizeRange(WorkloadConfig.BLOCK_SIZE))
    data_size: SizeRange = field(
        default_factory=lambda: SizeRange(WorkloadConfig.DATA_SIZE))
    writers: int = WorkloadConfig.WRITERS
    duration: Optional[float] = None
    output_dir: str = WorkloadConfig.OUTPUT_DIR
    keep_files: bool = False

    def combinations(self):
        """Пары (data_size, block_size) в порядке запуска"""
        return [(d, b) for d in self.data_size.datas()
                for b in self.block_size.blocks()]


def load_settings(environ=None) -> Settings:
    """Чтение настроек из переменных окружения DISKIO_*"""
    env = os.environ if environ is None else environ

    path = env.get("DISKIO_PATH", "")
    if not path:
        raise ValueError("DISKIO_PATH is not set")

    writers = int(env.get("DISKIO_WRITERS", WorkloadConfig.WRITERS))
    if writers < 1:
        raise ValueError(f"DISKIO_WRITERS must be >= 1, got {writers}")

    block_size = SizeRange.parse(
        env.get("DISKIO_BLOCK_SIZE", str(WorkloadConfig.BLOCK_SIZE)))
    if block_size.start <= 0:
        raise ValueError(f"DISKIO_BLOCK_SIZE must be positive, got {block_size.start}")

    duration = env.get("DISKIO_DURATION")
    duration = float(duration) if duration else None
    if duration is not None and duration < 0:
        raise ValueError(f"DISKIO_DURATION must be >= 0, got {duration}")

    return Settings(
        path=path,
        block_size=block_size,
        data_size=SizeRange.parse(
            env.get("DISKIO_DATA_SIZE", str(WorkloadConfig.DATA_SIZE))),
        writers=writers,
        duration=duration,
        output_dir=env.get("DISKIO_OUTPUT_DIR", WorkloadConfig.OUTPUT_DIR),
        keep_files=env.get("DISKIO_KEEP_FILES", "").lower() in ("1", "true", "yes"),
    )

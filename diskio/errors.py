"""Исключения бенчмарка"""

from typing import Optional


class DiskioError(OSError):
    """Базовая ошибка diskio. Подкласс OSError."""


class FlushError(DiskioError):
    """Ошибка цикла write+sync на конкретной итерации"""

    def __init__(self, phase: str, iteration: int, message: str,
                 errno: Optional[int] = None):
        self.phase = phase
        self.iteration = iteration
        if errno is None:
            super().__init__(message)
        else:
            super().__init__(errno, message)

    def __str__(self):
        return self.strerror if self.errno is not None else super().__str__()


class WriteError(FlushError):
    """Ошибка записи блока"""

    def __init__(self, iteration: int, cause: Optional[OSError] = None,
                 message: Optional[str] = None):
        self.cause = cause
        if message is None:
            message = f"invalid write on iteration {iteration}: {cause}"
        super().__init__("write", iteration, message,
                         cause.errno if cause is not None else None)


class PartialWriteError(WriteError):
    """Блок записан не полностью"""

    def __init__(self, iteration: int, written: int, expected: int):
        self.written = written
        self.expected = expected
        super().__init__(
            iteration,
            message=f"partial write on iteration {iteration}: "
                    f"{written} of {expected} bytes",
        )


class SyncError(FlushError):
    """Ошибка fsync"""

    def __init__(self, iteration: int, cause: OSError):
        self.cause = cause
        super().__init__("sync", iteration,
                         f"sync failed on iteration {iteration}: {cause}",
                         cause.errno)

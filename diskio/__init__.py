"""Disk flush benchmark: write+sync latency and throughput"""

from .base import FlushLoop, Sample, make_block, iterations_for
from .errors import DiskioError, FlushError, WriteError, PartialWriteError, SyncError
from .filesystem import FileFlushBenchmark
from .metrics import FlushResult, MetricsCollector, summarize, throughput_mbps
from .workloads import WorkloadConfig, SizeRange, Settings, load_settings

__all__ = [
    'FlushLoop',
    'Sample',
    'make_block',
    'iterations_for',
    'DiskioError',
    'FlushError',
    'WriteError',
    'PartialWriteError',
    'SyncError',
    'FileFlushBenchmark',
    'FlushResult',
    'MetricsCollector',
    'summarize',
    'throughput_mbps',
    'WorkloadConfig',
    'SizeRange',
    'Settings',
    'load_settings',
]

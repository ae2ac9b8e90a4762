"""Сбор и обработка метрик"""

import json
from dataclasses import dataclass, field, fields
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence

import numpy as np

from .base import Sample
from .workloads import KB, MB, GB, TB


@dataclass
class FlushResult:
    """Результаты одного запуска"""
    name: str
    block_size: int
    data_size: int
    writers: int
    iterations: int
    total_bytes: int
    busy_time_sec: float
    wall_time_sec: float
    throughput_mbps: float
    wall_throughput_mbps: float
    latency_avg_ms: float
    latency_min_ms: float
    latency_max_ms: float
    latency_p95_ms: float
    latency_p99_ms: float
    write_avg_ms: float
    sync_avg_ms: float
    throughput_series: List[float] = field(default_factory=list)
    samples: List[Sample] = field(default_factory=list, repr=False)

    def to_dict(self, include_samples: bool = False):
        data = {f.name: getattr(self, f.name) for f in fields(self) if f.name != 'samples'}
        data['throughput_series'] = list(self.throughput_series)
        if include_samples:
            data['samples'] = [s.to_dict() for s in self.samples]
        return data


def total_bytes(samples: Sequence[Sample]) -> int:
    return sum(s.bytes_written for s in samples)


def busy_time(samples: Sequence[Sample]) -> float:
    """Суммарное время внутри циклов write+sync, сек"""
    return sum(s.latency for s in samples)


def throughput_mbps(samples: Sequence[Sample]) -> float:
    """Throughput в MB/s по журналу измерений"""
    elapsed = busy_time(samples)
    if elapsed <= 0:
        return 0.0
    return (total_bytes(samples) / MB) / elapsed


def throughput_series(samples: Sequence[Sample], interval: float = 1.0) -> List[float]:
    """
    Throughput (MB/s) по интервалам времени со скользящим средним:
    каждое значение - среднее текущего интервала и предыдущего значения.
    """
    if not samples:
        return []
    if interval <= 0:
        raise ValueError(f"interval must be positive, got {interval}")

    timestamps = np.array([s.timestamp for s in samples])
    sizes = np.array([s.bytes_written for s in samples], dtype=float)
    buckets = ((timestamps - timestamps.min()) // interval).astype(int)
    per_bucket = np.bincount(buckets, weights=sizes) / MB / interval

    series: List[float] = []
    for current in per_bucket:
        series.append(float(current) if not series else (series[-1] + float(current)) / 2)
    return series


def summarize(runs: Sequence[Sequence[Sample]], name: str, block_size: int,
              data_size: int, wall_time: float = 0.0) -> FlushResult:
    """
    Вычисление метрик из журналов писателей.
    Писатели работают параллельно, поэтому время занятости запуска -
    максимальная сумма латентностей среди писателей.
    """
    samples = [s for run in runs for s in run]
    nbytes = total_bytes(samples)
    busy = max((busy_time(run) for run in runs), default=0.0)

    if not samples:
        return FlushResult(
            name=name,
            block_size=block_size,
            data_size=data_size,
            writers=len(runs),
            iterations=0,
            total_bytes=0,
            busy_time_sec=0.0,
            wall_time_sec=wall_time,
            throughput_mbps=0.0,
            wall_throughput_mbps=0.0,
            latency_avg_ms=0.0,
            latency_min_ms=0.0,
            latency_max_ms=0.0,
            latency_p95_ms=0.0,
            latency_p99_ms=0.0,
            write_avg_ms=0.0,
            sync_avg_ms=0.0,
        )

    latencies = np.array([s.latency_ms for s in samples])
    writes = np.array([s.write_duration for s in samples]) * 1000
    syncs = np.array([s.sync_duration for s in samples]) * 1000

    return FlushResult(
        name=name,
        block_size=block_size,
        data_size=data_size,
        writers=len(runs),
        iterations=len(samples),
        total_bytes=nbytes,
        busy_time_sec=busy,
        wall_time_sec=wall_time,
        throughput_mbps=(nbytes / MB) / busy if busy > 0 else 0.0,
        wall_throughput_mbps=(nbytes / MB) / wall_time if wall_time > 0 else 0.0,
        latency_avg_ms=float(np.mean(latencies)),
        latency_min_ms=float(np.min(latencies)),
        latency_max_ms=float(np.max(latencies)),
        latency_p95_ms=float(np.percentile(latencies, 95)),
        latency_p99_ms=float(np.percentile(latencies, 99)),
        write_avg_ms=float(np.mean(writes)),
        sync_avg_ms=float(np.mean(syncs)),
        throughput_series=throughput_series(samples),
        samples=samples,
    )


def humanize(nbytes: int) -> str:
    """Человекочитаемый размер"""
    if nbytes < MB:
        return f"{nbytes // KB}KB"
    elif nbytes < GB:
        return f"{nbytes // MB}MB"
    elif nbytes < TB:
        return f"{nbytes // GB}GB"
    return f"{nbytes // TB}TB"


class MetricsCollector:
    """Сборщик метрик со всех запусков"""

    def __init__(self):
        self.results: List[FlushResult] = []
        self.timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")

    def add_result(self, result: FlushResult):
        """Добавить результат запуска"""
        self.results.append(result)

    def save_raw_data(self, output_dir: Path, include_samples: bool = True) -> Path:
        """Сохранить сырые данные в JSON"""
        output_dir.mkdir(parents=True, exist_ok=True)

        data = {
            'timestamp': self.timestamp,
            'results': [r.to_dict(include_samples) for r in self.results]
        }

        output_file = output_dir / f"benchmark_raw_{self.timestamp}.json"
        with open(output_file, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

        print(f"\n✅ Raw data saved: {output_file}")
        return output_file

    def generate_report(self, output_dir: Optional[Path] = None) -> str:
        """Генерация текстового отчета"""
        report_lines = []
        report_lines.append("=" * 80)
        report_lines.append("DISK FLUSH BENCHMARK REPORT")
        report_lines.append("=" * 80)
        report_lines.append(f"Timestamp: {self.timestamp}")

        # Группируем результаты по объему данных
        data_sizes = list(dict.fromkeys(r.data_size for r in self.results))

        for data_size in data_sizes:
            results = self.get_results_by_data_size(data_size)
            report_lines.append(f"\n{'=' * 80}")
            report_lines.append(f"DATA SIZE: {humanize(data_size)}")
            report_lines.append('=' * 80)

            for result in results:
                report_lines.append(f"\n  Block size: {result.block_size} bytes, "
                                    f"writers: {result.writers}")
                report_lines.append(f"  {'─' * 70}")
                report_lines.append(f"    Written:         {humanize(result.total_bytes):>10}")
                report_lines.append(f"    Iterations:      {result.iterations:>10}")
                report_lines.append(f"    Throughput:      {result.throughput_mbps:>10.2f} MB/s")
                report_lines.append(f"    Wall throughput: {result.wall_throughput_mbps:>10.2f} MB/s")
                report_lines.append(f"    Latency (avg):   {result.latency_avg_ms:>10.3f} ms")
                report_lines.append(f"    Latency (min):   {result.latency_min_ms:>10.3f} ms")
                report_lines.append(f"    Latency (max):   {result.latency_max_ms:>10.3f} ms")
                report_lines.append(f"    Latency (p95):   {result.latency_p95_ms:>10.3f} ms")
                report_lines.append(f"    Latency (p99):   {result.latency_p99_ms:>10.3f} ms")
                report_lines.append(f"    Write (avg):     {result.write_avg_ms:>10.3f} ms")
                report_lines.append(f"    Sync (avg):      {result.sync_avg_ms:>10.3f} ms")
                report_lines.append(f"    Total time:      {result.wall_time_sec:>10.2f} sec")

            # Сравнение размеров блока
            if len(results) > 1:
                report_lines.append(f"\n  Comparison (Throughput):")
                report_lines.append(f"  {'─' * 70}")

                sorted_results = sorted(results, key=lambda x: x.throughput_mbps, reverse=True)
                best = sorted_results[0]

                for r in sorted_results:
                    if r.throughput_mbps > 0:
                        ratio = (r.throughput_mbps / best.throughput_mbps) * 100
                        report_lines.append(f"    {r.block_size:>12} B {r.throughput_mbps:8.2f} MB/s ({ratio:5.1f}%)")

        report_lines.append("\n" + "=" * 80)

        report_text = "\n".join(report_lines)

        if output_dir is not None:
            output_dir.mkdir(parents=True, exist_ok=True)
            report_file = output_dir / f"benchmark_report_{self.timestamp}.txt"
            with open(report_file, 'w', encoding='utf-8') as f:
                f.write(report_text)
            print(f"✅ Report saved: {report_file}")

        print("\n" + report_text)
        return report_text

    def get_results_by_data_size(self, data_size: int) -> List[FlushResult]:
        """Получить результаты для конкретного объема данных"""
        return [r for r in self.results if r.data_size == data_size]

#!/usr/bin/env python3
"""
Disk Flush Benchmark Tool
Латентность и пропускная способность цикла write+sync

Настройки читаются из окружения:
  DISKIO_PATH         директория для файлов данных (обязательно)
  DISKIO_BLOCK_SIZE   размер блока или диапазон, например 1K или 128..1M
  DISKIO_DATA_SIZE    объем данных или диапазон, например 1G или 1M..1G
  DISKIO_WRITERS      число писателей (по файлу на писателя)
  DISKIO_DURATION     бюджет времени на запуск, сек
  DISKIO_OUTPUT_DIR   директория для отчетов
  DISKIO_KEEP_FILES   не удалять файлы данных (1/true/yes)
"""
import sys
from pathlib import Path

from diskio import DiskioError, FileFlushBenchmark, MetricsCollector, load_settings


def main():
    try:
        settings = load_settings()
    except ValueError as e:
        print(f"❌ Invalid configuration: {e}")
        sys.exit(2)

    combinations = settings.combinations()

    print("=" * 80)
    print("DISK FLUSH BENCHMARK")
    print("=" * 80)
    print(f"Path:         {settings.path}")
    print(f"Block sizes:  {', '.join(str(b) for b in settings.block_size.blocks())}")
    print(f"Data sizes:   {', '.join(str(d) for d in settings.data_size.datas())}")
    print(f"Writers:      {settings.writers}")
    print(f"Duration:     {settings.duration or 'unlimited'}")
    print(f"Output:       {settings.output_dir}")
    print("=" * 80)
    print()

    collector = MetricsCollector()
    total = len(combinations)

    for current, (data_size, block_size) in enumerate(combinations, start=1):
        print(f"\n[{current}/{total}] Running data-size {data_size} / block-size {block_size}...")
        print("-" * 80)

        benchmark = FileFlushBenchmark(
            settings.path,
            block_size=block_size,
            data_size=data_size,
            writers=settings.writers,
            duration=settings.duration,
            keep_files=settings.keep_files,
        )
        try:
            result = benchmark.run()
        except DiskioError as e:
            print(f"❌ Error running {benchmark.name}: {e}")
            sys.exit(1)

        collector.add_result(result)
        print(f"✅ Completed: {result.throughput_mbps:.2f} MB/s, "
              f"{result.latency_avg_ms:.3f}ms avg latency")

    output_dir = Path(settings.output_dir)

    print("\n" + "=" * 80)
    print("SAVING RESULTS")
    print("=" * 80)

    collector.save_raw_data(output_dir)
    collector.generate_report(output_dir)

    print("\n" + "=" * 80)
    print("✅ BENCHMARK COMPLETED")
    print("=" * 80)
    print(f"\nResults saved to: {output_dir.absolute()}")


if __name__ == '__main__':
    main()

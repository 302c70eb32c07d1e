"""
Folder batch processing.

Runs a :class:`~stickerstag.layer_effects.Pipeline` over every eligible image
below a directory. Outputs are written next to their sources with a stage
suffix (``fox.png`` -> ``fox.cutout.webp``). Reruns are idempotent: sources
whose output already exists are skipped. A file that fails is recorded and
the batch moves on.

Images are independent, so they are distributed over worker processes, one
file per task. Workers receive the pipeline as a dictionary and rebuild it.
"""

from __future__ import annotations

from concurrent.futures import Future, ProcessPoolExecutor
from dataclasses import dataclass, field
import logging
import os
from pathlib import Path
from typing import Any, Iterable

from .config import settings
from .io import SUPPORTED_INPUT_EXTENSIONS, load_image, save_image
from .layer_effects.pipeline import Pipeline

logger = logging.getLogger(__name__)


@dataclass
class BatchReport:
    """Outcome of a batch run.

    :ivar processed: Outputs written
    :ivar skipped: Sources whose output already existed
    :ivar failed: (source, error message) of every failed file
    """
    processed: list[Path] = field(default_factory=list)
    skipped: list[Path] = field(default_factory=list)
    failed: list[tuple[Path, str]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed

    def __str__(self) -> str:
        return (
            f"{len(self.processed)} generated, {len(self.skipped)} skipped, "
            f"{len(self.failed)} errors"
        )


def _stage_suffix(path: Path) -> str | None:
    """Stage suffix of a file name such as ``fox.cutout.webp`` -> ``cutout``."""
    parts = path.name.split(".")
    return parts[-2].lower() if len(parts) >= 3 else None


def output_path_for(source: str | os.PathLike, suffix: str,
                    strip_suffixes: Iterable[str] = (), extension: str = ".webp") -> Path:
    """
    Output path of a stage, next to its source.

    :param source: Source image
    :param suffix: Stage suffix inserted before the extension
    :param strip_suffixes: Stage suffixes of the source to replace, e.g.
        ``("cutout",)`` turns ``fox.cutout.webp`` into ``fox.sticker.webp``
    :param extension: Output extension
    """
    source = Path(source)
    stem = source.stem
    current = _stage_suffix(source)
    if current is not None and current in {s.lower() for s in strip_suffixes}:
        stem = stem.rsplit(".", 1)[0]
    return source.with_name(f"{stem}.{suffix}{extension}")


def discover_sources(root: str | os.PathLike,
                     extensions: Iterable[str] = SUPPORTED_INPUT_EXTENSIONS,
                     exclude_suffixes: Iterable[str] = (),
                     require_suffix: str | None = None) -> list[Path]:
    """
    Eligible images below ``root``, sorted.

    :param root: Directory to walk recursively
    :param extensions: File extensions to accept, with leading dot
    :param exclude_suffixes: Stage suffixes to ignore, typically the outputs
        of this and later stages
    :param require_suffix: Only accept files carrying this stage suffix
    """
    root = Path(root)
    if not root.is_dir():
        raise NotADirectoryError(f"Not a directory: {root}")
    extensions = {e.lower() for e in extensions}
    excluded = {s.lower() for s in exclude_suffixes}
    sources = []
    for path in sorted(root.rglob("*")):
        if not path.is_file() or path.suffix.lower() not in extensions:
            continue
        stage = _stage_suffix(path)
        if require_suffix is not None and stage != require_suffix.lower():
            continue
        if stage is not None and stage in excluded:
            continue
        sources.append(path)
    return sources


def process_file(source: str | os.PathLike, target: str | os.PathLike,
                 pipeline: Pipeline | dict[str, Any]) -> Path:
    """
    Load, run and save a single image.

    :param source: Input image
    :param target: Output path (.webp or .png)
    :param pipeline: Pipeline or its dictionary form
    :return: The written path
    """
    if isinstance(pipeline, dict):
        pipeline = Pipeline.from_dict(pipeline)
    buffer = load_image(source)
    result = pipeline.run(buffer)
    return save_image(result.image, target)


def _resolve_workers(workers: int | None, tasks: int) -> int:
    if not workers:
        workers = settings.MAX_WORKERS or os.cpu_count() or 1
    return max(1, min(int(workers), tasks))


def run_batch(sources: Iterable[str | os.PathLike], pipeline: Pipeline,
              suffix: str | None = None, strip_suffixes: Iterable[str] = (),
              workers: int | None = None, overwrite: bool = False) -> BatchReport:
    """
    Run a pipeline over many files.

    :param sources: Input images
    :param pipeline: Effects to apply
    :param suffix: Output stage suffix, defaults to the pipeline's
    :param strip_suffixes: Source stage suffixes replaced by ``suffix``
    :param workers: Worker processes; 1 runs inline, None or 0 uses
        ``settings.MAX_WORKERS`` or the CPU count
    :param overwrite: Regenerate outputs that already exist
    :return: What was processed, skipped and failed
    """
    suffix = suffix or pipeline.output_suffix
    strip_suffixes = tuple(strip_suffixes)
    report = BatchReport()

    tasks: list[tuple[Path, Path]] = []
    for source in sources:
        source = Path(source)
        target = output_path_for(source, suffix, strip_suffixes)
        if target.exists() and not overwrite:
            logger.info(f"Skipped: {source.name} ({target.name} exists)")
            report.skipped.append(source)
            continue
        tasks.append((source, target))

    if not tasks:
        logger.info(f"Batch complete: {report}")
        return report

    workers = _resolve_workers(workers, len(tasks))
    if workers == 1:
        for source, target in tasks:
            try:
                process_file(source, target, pipeline)
            except Exception as e:
                _record_failure(report, source, e)
            else:
                _record_success(report, source, target)
    else:
        pipeline_data = pipeline.to_dict()
        with ProcessPoolExecutor(max_workers=workers) as executor:
            futures: list[tuple[Path, Path, Future]] = [
                (source, target, executor.submit(process_file, source, target, pipeline_data))
                for source, target in tasks
            ]
            for source, target, future in futures:
                try:
                    future.result()
                except Exception as e:
                    _record_failure(report, source, e)
                else:
                    _record_success(report, source, target)

    logger.info(f"Batch complete: {report}")
    return report


def _record_success(report: BatchReport, source: Path, target: Path) -> None:
    logger.info(f"Generated: {target.name} from {source.name}")
    report.processed.append(target)


def _record_failure(report: BatchReport, source: Path, error: Exception) -> None:
    logger.warning(f"Failed: {source} - {error}")
    report.failed.append((source, str(error)))

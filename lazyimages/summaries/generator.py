"""Batch summary generator with parallel processing."""

from __future__ import annotations

import logging
from concurrent.futures import ProcessPoolExecutor, as_completed
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from lazyimages.summaries.backends.registry import get_backend
from lazyimages.summaries.cache import SummaryStore
from lazyimages.summaries.config import SummaryConfig
from lazyimages.summaries.engine import ColorSummaryEngine
from lazyimages.summaries.models import ImageSummary

logger = logging.getLogger(__name__)


@dataclass
class ImageTask:
    """Task for summarizing a single image."""

    image_id: str
    path: str
    backend: str


def _process_image(task: ImageTask) -> dict:
    """Summarize a single image (runs in worker process)."""
    result = {
        "image_id": task.image_id,
        "summary": None,
        "error": None,
    }

    backend = get_backend(task.backend)
    engine = ColorSummaryEngine(Path(task.path), backend)
    summary = engine.summarize()

    if backend is None:
        result["error"] = f"No imaging backend available ({task.backend})"
    elif summary.empty:
        result["error"] = f"Unreadable image: {task.path}"
    else:
        result["summary"] = summary.model_dump_json()
    return result


def image_id_for_path(path: Path) -> str:
    """Default image id: the file name without extension."""
    return path.stem


class GenerationResult:
    """Result of a summary generation batch."""

    def __init__(self) -> None:
        self.generated: int = 0
        self.skipped: int = 0
        self.failed: int = 0
        self.errors: list[tuple[str, str]] = []

    @property
    def total(self) -> int:
        return self.generated + self.skipped + self.failed


class SummaryGenerator:
    """Computes summaries for image files and stores them."""

    def __init__(
        self,
        store: SummaryStore,
        config: SummaryConfig | None = None,
    ) -> None:
        self.store = store
        self.config = config or SummaryConfig()

    def generate_for_path(
        self,
        path: Path,
        image_id: str | None = None,
        source_url: str | None = None,
        force: bool = False,
    ) -> GenerationResult:
        """Summarize a single image file (non-parallel)."""
        result = GenerationResult()
        image_id = image_id or image_id_for_path(path)

        if not self._is_supported(path) or (not force and self.store.exists(image_id)):
            result.skipped += 1
            return result

        task_result = _process_image(
            ImageTask(image_id=image_id, path=str(path), backend=self.config.backend.value)
        )
        self._record(task_result, path, source_url, result)
        return result

    def generate_for_paths(
        self,
        paths: list[Path],
        force: bool = False,
        progress_callback: Callable[[int, int], None] | None = None,
    ) -> GenerationResult:
        """Summarize many image files using parallel processing."""
        result = GenerationResult()

        tasks: list[ImageTask] = []
        seen: dict[str, Path] = {}
        for path in paths:
            image_id = image_id_for_path(path)
            if not self._is_supported(path) or (not force and self.store.exists(image_id)):
                result.skipped += 1
                continue
            if image_id in seen:
                # One store entry per id; the first path wins
                error = f"Duplicate image id {image_id!r}: {path} and {seen[image_id]}"
                result.failed += 1
                result.errors.append((image_id, error))
                logger.warning(error)
                continue
            seen[image_id] = path
            tasks.append(
                ImageTask(image_id=image_id, path=str(path), backend=self.config.backend.value)
            )

        if not tasks:
            return result

        total = len(tasks)
        completed = 0
        paths_by_id = {task.image_id: Path(task.path) for task in tasks}

        if self.config.workers == 1:
            for task in tasks:
                self._record(_process_image(task), paths_by_id[task.image_id], None, result)
                completed += 1
                if progress_callback:
                    progress_callback(completed, total)
            return result

        with ProcessPoolExecutor(max_workers=self.config.workers) as executor:
            futures = {executor.submit(_process_image, task): task for task in tasks}

            for future in as_completed(futures):
                task = futures[future]
                try:
                    self._record(future.result(), paths_by_id[task.image_id], None, result)
                except Exception as e:
                    result.failed += 1
                    result.errors.append((task.image_id, str(e)))
                    logger.warning(f"Failed to summarize {task.path}: {e}")

                completed += 1
                if progress_callback:
                    progress_callback(completed, total)

        return result

    def _record(
        self,
        task_result: dict,
        path: Path,
        source_url: str | None,
        result: GenerationResult,
    ) -> None:
        """Store a worker result and update counters."""
        image_id = task_result["image_id"]
        if task_result["summary"] is None:
            result.failed += 1
            result.errors.append((image_id, task_result["error"]))
            logger.warning(f"Failed to summarize {path}: {task_result['error']}")
            return

        summary = ImageSummary.model_validate_json(task_result["summary"])
        self.store.add(image_id, summary, source_path=path, source_url=source_url)
        result.generated += 1
        logger.debug(f"Summarized {path} as {image_id}")

    def _is_supported(self, path: Path) -> bool:
        return path.suffix.lstrip(".").lower() in self.config.supported_formats

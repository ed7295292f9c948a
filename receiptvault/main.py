import argparse
import sys
from collections.abc import Sequence
from pathlib import Path

from receiptvault.config.settings import Settings
from receiptvault.logging.logger import Log
from receiptvault.pipeline.models import PipelineResult
from receiptvault.pipeline.orchestrator import build_orchestrator
from receiptvault.storage.exceptions import ImageLoadError
from receiptvault.storage.image_loader import load_image
from receiptvault.worker.batch_runner import BatchRunner


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="receiptvault",
        description="Archive receipt images locally and sync them to Google Drive.",
    )
    parser.add_argument("images", nargs="+", type=Path, help="receipt image files, one per page")
    parser.add_argument("--log-file", default=None, help="also write logs to this file")
    return parser.parse_args(argv)


def _summary(page: int, result: PipelineResult) -> str:
    if not result.succeeded:
        return f"page {page}: failed ({result.error})"
    line = f"page {page}: {result.outcome.value} -> {result.local_path}"
    if result.warnings:
        line += f" ({len(result.warnings)} warning(s))"
    return line


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point: load settings -> build orchestrator -> run the batch."""
    args = _parse_args(argv)
    settings = Settings()
    Log.configure(settings.log_level, args.log_file)

    try:
        images = [load_image(path) for path in args.images]
    except ImageLoadError as exc:
        Log.error(str(exc))
        return 2

    try:
        orchestrator = build_orchestrator(settings)
    except ValueError as exc:
        Log.error(f"Invalid configuration: {exc}")
        return 2

    results = BatchRunner(orchestrator).run(images)
    for page, result in enumerate(results, start=1):
        print(_summary(page, result))
    return 1 if any(not result.succeeded for result in results) else 0


if __name__ == "__main__":
    sys.exit(main())

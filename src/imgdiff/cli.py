from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import NoReturn

import click

from imgdiff import __version__
from imgdiff.compare import compare_images
from imgdiff.errors import SOURCE, TARGET, CompareError
from imgdiff.loader import ALPHA_MODES
from imgdiff.settings import load_settings

EXIT_OK = 0
EXIT_ABOVE_LIMIT = 1
EXIT_ERROR = 2


class _EchoHandler(logging.Handler):
    """Route log records through click so they follow the current stderr."""

    def emit(self, record: logging.LogRecord) -> None:
        click.echo(self.format(record), err=True)


def _enable_debug_logging() -> None:
    logger = logging.getLogger("imgdiff")
    if not any(isinstance(h, _EchoHandler) for h in logger.handlers):
        handler = _EchoHandler()
        handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
        logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)


def _fail(err: CompareError, use_json: bool) -> NoReturn:
    if use_json:
        click.echo(json.dumps({"error": err.to_dict()}), err=True)
    else:
        click.echo(f"error: {err}", err=True)
    sys.exit(EXIT_ERROR)


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__, prog_name="imgdiff")
@click.argument("one", required=False, type=click.Path(path_type=Path))
@click.argument("two", required=False, type=click.Path(path_type=Path))
@click.option(
    "--alpha",
    type=click.Choice(ALPHA_MODES),
    default=None,
    help="Alpha handling before comparison (default: $IMGDIFF_ALPHA or premultiplied).",
)
@click.option(
    "--workers",
    type=click.IntRange(min=1),
    default=None,
    help="Threads scanning row bands (default: $IMGDIFF_WORKERS or 1).",
)
@click.option(
    "--fail-above",
    type=click.FloatRange(0.0, 1.0),
    default=None,
    help="Exit 1 if the max difference is above this value.",
)
@click.option("--json", "use_json", is_flag=True, help="JSON output.")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging on stderr.")
def main(
    one: Path | None,
    two: Path | None,
    alpha: str | None,
    workers: int | None,
    fail_above: float | None,
    use_json: bool,
    verbose: bool,
) -> None:
    """Print the max per-channel pixel difference between images ONE and TWO.

    The result is in [0, 1]: 0 for identical pixels, 1 when some channel
    goes from 0 to 255. Exit 0 on success, 1 if above --fail-above,
    2 on error (missing argument, unreadable image, size mismatch).
    """
    if verbose:
        _enable_debug_logging()

    if one is None:
        _fail(CompareError.missing_argument(SOURCE), use_json)
    if two is None:
        _fail(CompareError.missing_argument(TARGET), use_json)

    settings = load_settings()
    try:
        result = compare_images(
            one,
            two,
            alpha=alpha or settings.alpha,
            workers=workers or settings.workers,
        )
    except CompareError as exc:
        _fail(exc, use_json)

    if use_json:
        payload = result.to_dict()
        if fail_above is not None:
            payload["fail_above"] = fail_above
        click.echo(json.dumps(payload))
    else:
        click.echo(f"Max pixel difference: {result.max_difference}")

    if fail_above is not None and result.max_difference > fail_above:
        sys.exit(EXIT_ABOVE_LIMIT)


if __name__ == "__main__":
    main()

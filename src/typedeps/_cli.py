"""Command-line interface for typedeps."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

from requests import RequestException
from sqlalchemy.exc import OperationalError

from . import __version__ as typedeps_version
from .config import OutputFormat, Settings
from .errors import TypedepsError
from .logger import setup_logger
from .resolution import resolve_all
from .tree import to_dot

logger = logging.getLogger(__name__)


def main() -> int:
    """Resolve the project named by the settings and write its dependency tree."""
    settings = Settings()
    setup_logger(settings.log_level)

    if settings.version:
        logger.info("typedeps version %s", typedeps_version)
        return 0

    # Clear the remote fetch cache
    if settings.clear_cache:
        cache_path = Path(settings.cache_path)
        if cache_path.exists():
            cache_path.unlink()

    if settings.output_file is not None and settings.output_file.exists() and not settings.force:
        logger.error("%s already exists! Re-run with `--force` to overwrite the file.", settings.output_file)
        return 1

    try:
        tree = resolve_all(
            settings.target,
            settings.to_options(),
            max_workers=settings.max_workers if settings.max_workers > 0 else None,
        )
    except TypedepsError as e:
        logger.error("%s", e)  # noqa: TRY400
        return 1
    except RequestException:
        logger.exception("Error fetching a remote dependency")
        return 1
    except OperationalError as e:
        msg = (
            f"Cache error: {e!r}\n\nIf you remove {settings.cache_path} or run `typedeps --clear_cache` and "
            "try again, the cache will automatically be rebuilt from scratch."
        )
        logger.exception(msg)
        return 1

    if settings.output_format == OutputFormat.json:
        output = json.dumps(tree.to_obj(), indent=4)
    elif settings.output_format == OutputFormat.dot:
        output = to_dot(tree, name=settings.target).source
    else:
        msg = f"Unsupported output format {settings.output_format}"
        raise NotImplementedError(msg)

    if settings.output_file is None:
        sys.stdout.write(output + "\n")
    else:
        settings.output_file.write_text(output + "\n")
        logger.info("Output saved to %s", settings.output_file.absolute())
    return 0

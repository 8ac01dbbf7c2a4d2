"""Resolve the TypeScript declaration dependencies of npm, Bower, and `tsconfig.json` projects."""

__version__ = "0.1.0"

from importlib import import_module
from pathlib import Path
from pkgutil import iter_modules

from .typedeps import *

# Every ecosystem module defines an EcosystemResolver subclass, which registers itself on import.
package_dir = Path(__file__).resolve().parent
for _, module_name, _ in iter_modules([str(package_dir)]):  # type: ignore
    if module_name not in ("__main__", "_cli"):
        import_module(f"{__name__}.{module_name}")

from .resolution import resolve_all, resolve_one  # noqa: E402
from .specifier import parse_dependency  # noqa: E402

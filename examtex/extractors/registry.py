from __future__ import annotations
from importlib import import_module
import functools
import logging
import pkgutil
from typing import Iterable, Tuple

from examtex.extractors.common import Layout

logger = logging.getLogger(__name__)

@functools.lru_cache(maxsize=1)
def discover_layouts() -> Tuple[Layout, ...]:
    """
    Auto-import all modules in examtex.extractors.layouts and return their
    layouts ordered from most specific (lowest PRIORITY) to most permissive.
    """
    import examtex.extractors.layouts as pkg
    found = []
    for m in pkgutil.iter_modules(pkg.__path__, pkg.__name__ + "."):
        mod = import_module(m.name)
        name = getattr(mod, "LAYOUT_NAME", None)
        header = getattr(mod, "HEADER", None)
        separator = getattr(mod, "SEPARATOR", None)
        if not isinstance(name, str) or header is None or separator is None:
            continue
        found.append(Layout(
            name=name,
            priority=int(getattr(mod, "PRIORITY", 100)),
            header=header,
            separator=separator,
            solution_end=getattr(mod, "SOLUTION_END", None),
        ))
    return tuple(sorted(found, key=lambda l: (l.priority, l.name)))

def select_layouts(names: Iterable[str] = ()) -> Tuple[Layout, ...]:
    """The cascade, optionally restricted to the named layouts."""
    layouts = discover_layouts()
    wanted = set(names)
    if not wanted:
        return layouts
    unknown = wanted - {l.name for l in layouts}
    if unknown:
        logger.warning("ignoring unknown layouts: %s", ", ".join(sorted(unknown)))
    return tuple(l for l in layouts if l.name in wanted)

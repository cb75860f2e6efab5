"""Backend discovery and selection.

Imaging libraries are optional at runtime: a backend whose library cannot be
imported is simply reported as unavailable.
"""

from __future__ import annotations

import importlib
import logging
from typing import Callable

from lazyimages.errors import NoBackendAvailableError
from lazyimages.summaries.backends.base import ImageBackend
from lazyimages.summaries.config import BackendName

logger = logging.getLogger(__name__)

# Preferred order for "auto": whole-image library first, raster library second
BACKEND_MODULES: dict[str, tuple[str, str]] = {
    BackendName.OPENCV.value: ("lazyimages.summaries.backends.opencv", "OpenCVBackend"),
    BackendName.PILLOW.value: ("lazyimages.summaries.backends.pillow", "PillowBackend"),
}


def _load_factory(name: str) -> Callable[[], ImageBackend] | None:
    module_name, class_name = BACKEND_MODULES[name]
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        logger.debug(f"Backend {name} unavailable: {e}")
        return None
    return getattr(module, class_name)


def available_backends() -> list[str]:
    """List names of backends whose library can be imported."""
    return [name for name in BACKEND_MODULES if _load_factory(name) is not None]


def get_backend(name: BackendName | str = BackendName.AUTO) -> ImageBackend | None:
    """Create a backend by name, or None if its library is missing.

    "auto" returns the first available backend in preference order.
    """
    name = BackendName(name).value
    candidates = list(BACKEND_MODULES) if name == BackendName.AUTO.value else [name]

    for candidate in candidates:
        factory = _load_factory(candidate)
        if factory is not None:
            return factory()

    logger.warning(f"No imaging backend available (requested: {name})")
    return None


def require_backend(name: BackendName | str = BackendName.AUTO) -> ImageBackend:
    """Like get_backend, but raise NoBackendAvailableError instead of returning None."""
    backend = get_backend(name)
    if backend is None:
        raise NoBackendAvailableError(f"No imaging backend available for '{name}'")
    return backend

# -*- coding: utf-8 -*-
"""paracurve: parametric 2D/3D curves, their evaluation and planar faces."""
from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("paracurve")
except PackageNotFoundError:  # pragma: no cover - handled when package not installed
    __version__ = "unknown"

# -*- coding: utf-8 -*-
from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("yapBSP")
except PackageNotFoundError:  # pragma: no cover - handled when package not installed
    __version__ = "unknown"

from yapbsp.bsp import RegionBSPTree3D, RegionNode3D, RegionSizeProperties
from yapbsp.errors import BSPTreeError, MalformedFacetError
from yapbsp.lines import Line3D, Segment3D
from yapbsp.linecast import (BoundaryList, BoundarySource, Linecastable,
                             LinecastPoint, linecast, linecast_first)
from yapbsp.partition import (HyperplaneLocation, RegionCutRule, RegionLocation,
                              Split, SplitLocation)
from yapbsp.plane import Plane, PlaneConvexSubset, PlaneSubset
from yapbsp.precision import DEFAULT_EPSILON, PrecisionContext
from yapbsp.volume import ConvexVolume

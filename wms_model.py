"""
Value types describing a parsed WMS capabilities document.

Everything here is immutable. Sequences are tuples and mappings are read-only
proxies, so a finished model can be shared between threads without copying.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterator, Mapping, NamedTuple, Optional, Tuple


class BoundingBox(NamedTuple):
    minx: float
    miny: float
    maxx: float
    maxy: float


class Size(NamedTuple):
    width: int
    height: int


@dataclass(frozen=True)
class OnlineResource:
    """An advertised access method: request method (or format) and URL."""

    type: Optional[str]
    url: Optional[str]


@dataclass(frozen=True)
class ContactAddress:
    address_type: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state_or_province: Optional[str] = None
    post_code: Optional[str] = None
    country: Optional[str] = None


@dataclass(frozen=True)
class ContactInformation:
    person: Optional[str] = None
    organisation: Optional[str] = None
    position: Optional[str] = None
    address: ContactAddress = field(default_factory=ContactAddress)
    voice_telephone: Optional[str] = None
    facsimile_telephone: Optional[str] = None
    electronic_mail_address: Optional[str] = None


@dataclass(frozen=True)
class ServiceDescription:
    name: Optional[str] = None
    title: Optional[str] = None
    online_resource: Optional[str] = None
    abstract: Optional[str] = None
    fees: Optional[str] = None
    access_constraints: Optional[str] = None
    keywords: Tuple[str, ...] = ()
    contact_information: ContactInformation = field(default_factory=ContactInformation)
    layer_limit: Optional[int] = None
    max_width: Optional[int] = None
    max_height: Optional[int] = None


@dataclass(frozen=True)
class LegendUrl:
    online_resource: OnlineResource
    size: Optional[Size] = None


@dataclass(frozen=True)
class LayerStyle:
    name: Optional[str] = None
    title: Optional[str] = None
    abstract: Optional[str] = None
    legend_url: Optional[LegendUrl] = None
    style_sheet_url: Optional[OnlineResource] = None


@dataclass(frozen=True)
class Dimension:
    name: Optional[str]
    units: Optional[str] = None
    unit_symbol: Optional[str] = None
    default: Optional[str] = None
    values: Optional[Tuple[str, ...]] = None


@dataclass(frozen=True)
class MetadataUrl:
    type: Optional[str]
    format: Optional[str]
    url: Optional[str]


@dataclass(frozen=True)
class LayerNode:
    """One node of the advertised layer hierarchy.

    ``name`` is absent for pure grouping layers. ``keywords`` is None when the
    layer has no KeywordList and ``children`` is None when it has no nested
    layers. ``crs`` keeps the SRS values first, then the CRS values, in
    document order.
    """

    name: Optional[str] = None
    title: Optional[str] = None
    abstract: Optional[str] = None
    queryable: bool = False
    keywords: Optional[Tuple[str, ...]] = None
    crs: Tuple[str, ...] = ()
    bounding_boxes: Mapping[str, BoundingBox] = field(default_factory=dict, hash=False)
    lat_lon_bounding_box: Optional[BoundingBox] = None
    styles: Tuple[LayerStyle, ...] = ()
    children: Optional[Tuple["LayerNode", ...]] = None
    opaque: bool = False
    cascaded: int = 0
    no_subsets: bool = False
    fixed_width: int = 0
    fixed_height: int = 0
    dimensions: Tuple[Dimension, ...] = ()
    metadata_urls: Tuple[MetadataUrl, ...] = ()

    def __post_init__(self):
        # take a private copy so the caller's dict cannot change the layer
        object.__setattr__(self, "bounding_boxes",
                           MappingProxyType(dict(self.bounding_boxes)))

    def walk(self) -> Iterator["LayerNode"]:
        """Yield this layer and all of its descendants, depth first."""
        yield self
        for child in self.children or ():
            yield from child.walk()

    def find(self, name) -> Optional["LayerNode"]:
        for layer in self.walk():
            if layer.name == name:
                return layer
        return None

    def __str__(self):
        return "Layer Name: %s Title: %s" % (self.name, self.title)


@dataclass(frozen=True)
class OperationMetadata:
    name: str
    formats: Tuple[str, ...] = ()
    methods: Tuple[OnlineResource, ...] = ()


@dataclass(frozen=True)
class Capabilities:
    version: str
    service: ServiceDescription
    get_map_output_formats: Tuple[str, ...]
    get_feature_info_output_formats: Tuple[str, ...]
    exception_formats: Optional[Tuple[str, ...]]
    get_map_requests: Tuple[OnlineResource, ...]
    get_feature_info_requests: Tuple[OnlineResource, ...]
    operations: Tuple[OperationMetadata, ...]
    layer: LayerNode
    # raw lxml element, handed through untouched
    vendor_specific_capabilities: Any = field(default=None, compare=False, hash=False, repr=False)

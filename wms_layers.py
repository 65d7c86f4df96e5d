"""
Recursive parsing of the Capability/Layer hierarchy into LayerNode trees.
"""
from __future__ import annotations

import dataclasses
import logging
import re
from types import MappingProxyType

from owslib.util import testXMLValue

from subcommon import (AUTO_ROOT_LAYER_NAME, InvalidBoundingBoxError,
                       MissingSectionError, find, find_href, find_text,
                       find_texts, findall)
from wms_model import (BoundingBox, Dimension, LayerNode, LayerStyle,
                       LegendUrl, MetadataUrl, OnlineResource, Size)

log = logging.getLogger(__name__)

BOUND_ATTRIBUTES = ("minx", "miny", "maxx", "maxy")

# plain invariant decimals only: no digit separators, no inf/nan
DECIMAL = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?", re.ASCII)


def _to_float(value):
    if value is None:
        return None
    value = value.strip()
    if not DECIMAL.fullmatch(value):
        return None
    return float(value)


def _to_int(value, default=None):
    number = _to_float(value)
    if number is None:
        return default
    return int(number)


def _bounds(values, layer_name, element):
    bounds = [_to_float(v) for v in values]
    # any single unreadable bound invalidates the whole box
    if any(b is None for b in bounds):
        raise InvalidBoundingBoxError(layer_name, element)
    return BoundingBox(*bounds)


def parse_crs(elem, ns):
    return find_texts(elem, "SRS", ns) + find_texts(elem, "CRS", ns)


def parse_bounding_boxes(elem, ns, layer_name):
    boxes = {}
    for bb in findall(elem, "BoundingBox", ns):
        crs = bb.get("CRS")
        if crs is None:
            crs = bb.get("SRS")
        if crs is None:
            log.debug("Skipping BoundingBox without CRS on layer %s", layer_name)
            continue
        boxes[crs] = _bounds([bb.get(a) for a in BOUND_ATTRIBUTES], layer_name, "BoundingBox")
    return MappingProxyType(boxes)


def parse_lat_lon_bounding_box(elem, ns, layer_name):
    b = find(elem, "LatLonBoundingBox", ns)
    if b is not None:
        return _bounds([b.get(a) for a in BOUND_ATTRIBUTES], layer_name, "LatLonBoundingBox")

    # 1.3.0 replaced LatLonBoundingBox by EX_GeographicBoundingBox
    b = find(elem, "EX_GeographicBoundingBox", ns)
    if b is not None:
        return _bounds([find_text(b, "westBoundLongitude", ns),
                        find_text(b, "southBoundLatitude", ns),
                        find_text(b, "eastBoundLongitude", ns),
                        find_text(b, "northBoundLatitude", ns)], layer_name, "EX_GeographicBoundingBox")
    return None


def parse_style(elem, ns):
    legend_url = None
    legend = find(elem, "LegendURL", ns)
    if legend is None:
        legend = find(elem, "LegendUrl", ns)
    if legend is not None:
        size = None
        width = _to_int(legend.get("width"))
        height = _to_int(legend.get("height"))
        if width is not None and height is not None:
            size = Size(width, height)
        legend_url = LegendUrl(
            online_resource=OnlineResource(type=find_text(legend, "Format", ns),
                                           url=find_href(legend, "OnlineResource", ns)),
            size=size)

    # only the href is taken from the style sheet, its Format is ignored
    style_sheet_url = None
    style_sheet = find(elem, "StyleSheetURL", ns)
    if style_sheet is not None:
        style_sheet_url = OnlineResource(type=None, url=find_href(style_sheet, "OnlineResource", ns))

    return LayerStyle(
        name=find_text(elem, "Name", ns),
        title=find_text(elem, "Title", ns),
        abstract=find_text(elem, "Abstract", ns),
        legend_url=legend_url,
        style_sheet_url=style_sheet_url)


def parse_dimension(elem):
    values = None
    if elem.text and elem.text.strip():
        values = tuple(v.strip() for v in elem.text.split(","))
    return Dimension(
        name=elem.get("name"),
        units=elem.get("units"),
        unit_symbol=elem.get("unitSymbol"),
        default=elem.get("default"),
        values=values)


def parse_metadata_url(elem, ns):
    return MetadataUrl(
        type=testXMLValue(elem.get("type"), attrib=True),
        format=find_text(elem, "Format", ns),
        url=find_href(elem, "OnlineResource", ns))


def parse_layer(elem, ns):
    '''
    Parse one Layer element, and recursively all Layer elements nested in it.
    * elem: a Layer element
    * ns: the NamespaceBindings of the document
    '''
    name = find_text(elem, "Name", ns)

    keywords = None
    if find(elem, "KeywordList", ns) is not None:
        keywords = find_texts(elem, "KeywordList/Keyword", ns)

    children = None
    child_elems = findall(elem, "Layer", ns)
    if child_elems:
        children = tuple(parse_layer(child, ns) for child in child_elems)

    return LayerNode(
        name=name,
        title=find_text(elem, "Title", ns),
        abstract=find_text(elem, "Abstract", ns),
        queryable=elem.get("queryable") == "1",
        keywords=keywords,
        crs=parse_crs(elem, ns),
        bounding_boxes=parse_bounding_boxes(elem, ns, name),
        lat_lon_bounding_box=parse_lat_lon_bounding_box(elem, ns, name),
        styles=tuple(parse_style(s, ns) for s in findall(elem, "Style", ns)),
        children=children,
        # layer attributes
        opaque=_to_int(elem.get("opaque"), 0) == 1,
        cascaded=_to_int(elem.get("cascaded"), 0),
        no_subsets=_to_int(elem.get("noSubsets"), 0) == 1,
        fixed_width=_to_int(elem.get("fixedWidth"), 0),
        fixed_height=_to_int(elem.get("fixedHeight"), 0),
        dimensions=tuple(parse_dimension(d) for d in findall(elem, "Dimension", ns)),
        metadata_urls=tuple(parse_metadata_url(m, ns) for m in findall(elem, "MetadataURL", ns)))


def build_layer_tree(capability, ns):
    '''
    Build the root LayerNode from the Layer elements directly under Capability.

    Servers should advertise exactly one root layer. Some advertise several; they
    are then grouped under a generated root which, for compatibility with
    existing callers, carries every field of the first sibling except name,
    title and children.
    '''
    layer_elems = findall(capability, "Layer", ns)
    if not layer_elems:
        raise MissingSectionError("Layer")

    if len(layer_elems) == 1:
        return parse_layer(layer_elems[0], ns)

    log.warning("Capabilities advertise %d root layers, generating a common root", len(layer_elems))
    layers = tuple(parse_layer(elem, ns) for elem in layer_elems)
    return dataclasses.replace(layers[0], name=AUTO_ROOT_LAYER_NAME, title="", children=layers)

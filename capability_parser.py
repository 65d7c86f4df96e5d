#! /usr/bin/env python
"""
Print a summary of a WMS capabilities document: service, formats and layer tree.

    python capability_parser.py http://localhost/wms --version 1.1.1
"""
import argparse
import sys

from owslib.util import ServiceException

from logging_logger import consoleLogger, fileLogger
from subcommon import CapabilitiesError
from subwms import WebMapService

'''
Preferred image formats for map thumbnails, image/png always comes first
'''
thumbnail_format_preferences = ['image/jpeg', 'image/gif', 'image/tiff']

'''
Coordinate systems under which a lat/lon bounding box can be used directly
'''
lat_lon_crs = ['epsg:4326', 'crs:84']


'''
Map thumbnail format decision. The supported formats are specified in thumbnail_format_preferences together with image/png.
* The image/png is the first option.
'''
def wms_format_selection(formatOptions):
    formatOption2 = None

    for formatOption in formatOptions:
        if formatOption.lower() == 'image/png':
            return formatOption
        elif formatOption2 is None and formatOption.lower() in thumbnail_format_preferences:
            formatOption2 = formatOption

    if formatOption2:
        return formatOption2
    raise ValueError("No desired format is found in the GetMap formats")


'''
Srs and boundingBox decision
* If any BoundingBox is advertised, return the first one with its crs. If not:
    * Check whether epsg:4326 or crs:84 is supported.
        * If yes, return the lat/lon bounding box with that crs.
        * If not, throw ValueError
'''
def srs_bbox_selection(layer):
    for crs, bbox in layer.bounding_boxes.items():
        return crs, bbox

    if layer.lat_lon_bounding_box is not None:
        for crs in layer.crs:
            if crs.lower() in lat_lon_crs:
                return crs, layer.lat_lon_bounding_box

    raise ValueError('No usable bounding box for layer %s' % layer.name)


'''
Reformat items in a list as a string with semicolons among each of them
'''
def list2str_with_semicolons(list_variable):
    if not list_variable:
        return None
    return "; ".join(list_variable)


def layer_lines(layer, depth=0):
    try:
        crs, bbox = srs_bbox_selection(layer)
        extent = '%s %s' % (crs, ','.join(repr(v) for v in bbox))
    except ValueError:
        extent = '-'

    flag = '*' if layer.queryable else ' '
    yield '%s%s %s (%s) [%s]' % ('  ' * depth, flag, layer.name or '<group>', layer.title or '', extent)
    for child in layer.children or ():
        yield from layer_lines(child, depth + 1)


def summary(wms):
    lines = [
        'Service: %s' % wms.service.title,
        'Version: %s' % wms.version,
        'Keywords: %s' % list2str_with_semicolons(wms.service.keywords),
        'GetMap formats: %s' % list2str_with_semicolons(wms.get_map_output_formats),
    ]
    try:
        lines.append('Thumbnail format: %s' % wms_format_selection(wms.get_map_output_formats))
    except ValueError:
        lines.append('Thumbnail format: -')
    lines.append('GetMap URL: %s' % wms.get_request_url('GetMap'))
    lines.append('Layers:')
    lines.extend(layer_lines(wms.layer, 1))
    return '\n'.join(lines)


def main(argv=None):
    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    parser.add_argument('url', help='WMS endpoint')
    parser.add_argument('--version', dest='wms_version', default=None, help='WMS version to request')
    parser.add_argument('--log-file', default=None, help='also log errors to this file')
    args = parser.parse_args(argv)

    logger = consoleLogger('wms_capabilities')
    if args.log_file:
        fileLogger(args.log_file, 'wms_capabilities')

    try:
        wms = WebMapService(args.url, version=args.wms_version)
    except (CapabilitiesError, ServiceException):
        logger.exception("Failed in digesting the capability document from %s", args.url)
        return 1

    print(summary(wms))
    return 0


if __name__ == '__main__':
    sys.exit(main())

"""
Common helpers shared by the WMS capabilities reader: request URL
construction, namespace binding, namespace-tolerant element paths and the
capabilities error types.
"""
from __future__ import annotations

from dataclasses import dataclass

from owslib.namespaces import Namespaces
from owslib.util import testXMLValue, xmltag_split

n = Namespaces()
WMS_NAMESPACE = n.get_namespace("wms")
XLINK_NAMESPACE = n.get_namespace("xlink")
XSI_NAMESPACE = n.get_namespace("xsi")

SUPPORTED_VERSIONS = ("1.0.0", "1.1.0", "1.1.1", "1.3.0")

# Name given to the artificial root when a server advertises several top-level layers
AUTO_ROOT_LAYER_NAME = "__auto_generated_root_layer__"


class CapabilitiesError(ValueError):
    """Base class for capabilities documents that cannot be used."""


class CapabilitiesDownloadError(CapabilitiesError):
    """Raised when the capabilities document could not be fetched or loaded."""

    def __init__(self, url=None):
        self.url = url
        super().__init__("Could not download capabilities")


class VersionError(CapabilitiesError):
    pass


class MissingVersionError(VersionError):
    def __init__(self):
        super().__init__("No service version number found")


class UnsupportedVersionError(VersionError):
    def __init__(self, version):
        self.version = version
        super().__init__("WMS Version %s not supported" % version)


class MissingSectionError(CapabilitiesError):
    """Raised when a required section of the document is absent."""

    def __init__(self, section):
        self.section = section
        super().__init__("No %s tag found in capabilities document" % section)


class InvalidBoundingBoxError(CapabilitiesError):
    def __init__(self, layer_name, element="LatLonBoundingBox"):
        self.layer_name = layer_name
        self.element = element
        super().__init__("Invalid %s on layer '%s'" % (element, layer_name))


@dataclass(frozen=True)
class NamespaceBindings:
    """Namespace URIs used for lookups in one capabilities document.

    ``sm`` is the namespace element lookups go through: the WMS namespace for
    1.3.0 documents and the empty namespace for older, unqualified ones.
    """

    default: str
    sm: str
    xlink: str = XLINK_NAMESPACE
    xsi: str = XSI_NAMESPACE

    @property
    def href(self):
        return "{%s}href" % self.xlink


def bind_namespaces(version):
    if version not in SUPPORTED_VERSIONS:
        raise UnsupportedVersionError(version)
    return NamespaceBindings(
        default=WMS_NAMESPACE,
        sm=WMS_NAMESPACE if version == "1.3.0" else "",
    )


def check_version(root):
    '''
    Return the version attribute of the capabilities root element, raising
    if it is missing or not one of SUPPORTED_VERSIONS
    '''
    version = root.get("version")
    if version is None:
        raise MissingVersionError()
    if version not in SUPPORTED_VERSIONS:
        raise UnsupportedVersionError(version)
    return version


def nspath(path, ns=None):
    '''
    Prefix every component of an element path with the namespace.
    Unlike owslib.util.nspath an empty or missing namespace leaves the path unqualified.
    '''
    if not ns:
        return path
    components = []
    for component in path.split("/"):
        if component != "*":
            component = "{%s}%s" % (ns, component)
        components.append(component)
    return "/".join(components)


def find(elem, path, ns):
    return elem.find(nspath(path, ns.sm))


def findall(elem, path, ns):
    return elem.findall(nspath(path, ns.sm))


def find_text(elem, path, ns):
    """Text of the first element at ``path`` under ``elem``, or None."""
    return testXMLValue(find(elem, path, ns))


def find_texts(elem, path, ns):
    # text of nested markup too, comments excluded
    return tuple("".join(e.xpath(".//text()")).strip() for e in findall(elem, path, ns))


def find_href(elem, path, ns):
    resource = find(elem, path, ns)
    if resource is None:
        return None
    return resource.get(ns.href)


def child_elements(elem):
    # skip comments and processing instructions
    return [child for child in elem if isinstance(child.tag, str)]


def WMSExceptionDetection(root):
    '''
    Return True when the document is a ServiceExceptionReport instead of a capabilities document
    '''
    return xmltag_split(root.tag) == "ServiceExceptionReport"


def service_exception_text(root):
    texts = [t.strip() for t in root.itertext() if t.strip()]
    return "\n".join(texts) or "ServiceException"


def build_capabilities_url(url, version=None):
    '''
    Build a GetCapabilities request from a service endpoint.
    Parameters already present in the URL (service, request, version) are kept as they are;
    the missing ones are appended.
    '''
    request = url
    if "?" not in request:
        request += "?"
    if not request.endswith("&") and not request.endswith("?"):
        request += "&"

    lowered = url.lower()
    if "service=" not in lowered:
        request += "SERVICE=WMS&"
    if "request=" not in lowered:
        request += "REQUEST=GetCapabilities&"
    if "version=" not in lowered and version:
        request += "VERSION=%s&" % version

    return request.rstrip("&")

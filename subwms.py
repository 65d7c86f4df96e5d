"""
API for reading Web Map Service capabilities (versions 1.0.0 to 1.3.0).
"""
from __future__ import annotations

import asyncio
import logging
import warnings
from collections import OrderedDict
from types import MappingProxyType

from lxml import etree
from owslib.util import ServiceException, xmltag_split

import subcommon
from subcommon import (MissingSectionError, bind_namespaces,
                       build_capabilities_url, check_version, child_elements,
                       find, find_href, find_text, find_texts, findall)
from wms_fetch import load_document, read_capabilities, xml_parser
from wms_layers import build_layer_tree
from wms_model import (Capabilities, ContactAddress, ContactInformation,
                       OnlineResource, OperationMetadata, ServiceDescription)

log = logging.getLogger(__name__)


def _to_int(value):
    try:
        return int(value) if value is not None else None
    except ValueError:
        return None


def parse_contact_information(elem, ns):
    if elem is None:
        return ContactInformation()

    address = find(elem, "ContactAddress", ns)
    if address is not None:
        address = ContactAddress(
            address_type=find_text(address, "AddressType", ns),
            address=find_text(address, "Address", ns),
            city=find_text(address, "City", ns),
            state_or_province=find_text(address, "StateOrProvince", ns),
            post_code=find_text(address, "PostCode", ns),
            country=find_text(address, "Country", ns))
    else:
        address = ContactAddress()

    # both spellings are found in the wild
    organisation = find_text(elem, "ContactPersonPrimary/ContactOrganization", ns)
    if organisation is None:
        organisation = find_text(elem, "ContactPersonPrimary/ContactOrganisation", ns)

    return ContactInformation(
        person=find_text(elem, "ContactPersonPrimary/ContactPerson", ns),
        organisation=organisation,
        position=find_text(elem, "ContactPosition", ns),
        address=address,
        voice_telephone=find_text(elem, "ContactVoiceTelephone", ns),
        facsimile_telephone=find_text(elem, "ContactFacsimileTelephone", ns),
        electronic_mail_address=find_text(elem, "ContactElectronicMailAddress", ns))


def parse_service(elem, ns):
    return ServiceDescription(
        name=find_text(elem, "Name", ns),
        title=find_text(elem, "Title", ns),
        online_resource=find_href(elem, "OnlineResource", ns),
        abstract=find_text(elem, "Abstract", ns),
        fees=find_text(elem, "Fees", ns),
        access_constraints=find_text(elem, "AccessConstraints", ns),
        keywords=find_texts(elem, "KeywordList/Keyword", ns),
        contact_information=parse_contact_information(find(elem, "ContactInformation", ns), ns),
        layer_limit=_to_int(find_text(elem, "LayerLimit", ns)),
        max_width=_to_int(find_text(elem, "MaxWidth", ns)),
        max_height=_to_int(find_text(elem, "MaxHeight", ns)))


def parse_operation(elem, ns):
    methods = []
    http = find(elem, "DCPType/HTTP", ns)
    if http is not None:
        for verb in child_elements(http):
            methods.append(OnlineResource(type=xmltag_split(verb.tag),
                                          url=find_href(verb, "OnlineResource", ns)))
    return OperationMetadata(
        name=xmltag_split(elem.tag),
        formats=find_texts(elem, "Format", ns),
        methods=tuple(methods))


def parse_capabilities(document):
    '''
    Build the Capabilities model from a parsed capabilities document
    (an lxml element or element tree). Raises instead of returning a partial model.
    '''
    root = document.getroot() if hasattr(document, "getroot") else document

    if subcommon.WMSExceptionDetection(root):
        raise ServiceException(subcommon.service_exception_text(root))

    version = check_version(root)
    ns = bind_namespaces(version)
    log.debug("Parsing WMS %s capabilities", version)

    service = find(root, "Service", ns)
    if service is None:
        raise MissingSectionError("Service")

    capability = find(root, "Capability", ns)
    if capability is None:
        raise MissingSectionError("Capability")

    request = find(capability, "Request", ns)
    if request is None:
        raise MissingSectionError("Request")

    get_map = find(request, "GetMap", ns)
    if get_map is None:
        raise MissingSectionError("GetMap")
    get_map = parse_operation(get_map, ns)

    get_feature_info = find(request, "GetFeatureInfo", ns)
    if get_feature_info is not None:
        get_feature_info = parse_operation(get_feature_info, ns)
    else:
        get_feature_info = OperationMetadata(name="GetFeatureInfo")

    exception_formats = None
    exception = find(capability, "Exception", ns)
    if exception is not None:
        exception_formats = find_texts(exception, "Format", ns)

    return Capabilities(
        version=version,
        service=parse_service(service, ns),
        get_map_output_formats=get_map.formats,
        get_feature_info_output_formats=get_feature_info.formats,
        exception_formats=exception_formats,
        get_map_requests=get_map.methods,
        get_feature_info_requests=get_feature_info.methods,
        operations=tuple(parse_operation(op, ns) for op in child_elements(request)),
        layer=build_layer_tree(capability, ns),
        vendor_specific_capabilities=find(capability, "VendorSpecificCapabilities", ns))


def _as_document(xml):
    if isinstance(xml, str):
        xml = xml.encode("utf-8")
    if isinstance(xml, bytes):
        return etree.fromstring(xml, parser=xml_parser())
    if hasattr(xml, "read"):
        return load_document(xml)
    return xml


class WebMapService:
    """Capabilities of a WMS server.

    Parameters
    ----------
    url : string
        Base URL of the service. Missing SERVICE, REQUEST and VERSION
        parameters are added before the document is requested.
    version : string
        Optional version hint sent as the VERSION parameter.
    xml : bytes, string, file-like or lxml element/tree
        A capabilities document the caller already has. Nothing is fetched.
    fetch : coroutine function
        Download method, ``wms_fetch.default_fetch`` when omitted.

    Example
    -------
        wms = WebMapService('http://example.com/wms', version='1.3.0')
        for layer in wms.layer.walk():
            print(layer.name, layer.title)
    """

    def __init__(self, url=None, version=None, xml=None, fetch=None):
        if url is None and xml is None:
            raise ValueError("Either url or xml must be given")

        request = None
        if xml is None:
            request = build_capabilities_url(url, version)
            xml = asyncio.run(read_capabilities(request, fetch))

        self._setup(url, request, _as_document(xml))

    @classmethod
    def _from_document(cls, url, request, document):
        wms = cls.__new__(cls)
        wms._setup(url, request, document)
        return wms

    def _setup(self, url, request, document):
        root = document.getroot() if hasattr(document, "getroot") else document
        object.__setattr__(self, "url", url)
        object.__setattr__(self, "request", request)
        object.__setattr__(self, "_capabilities_root", root)
        object.__setattr__(self, "capabilities", parse_capabilities(root))
        object.__setattr__(self, "contents", self._gather_contents())

    def __setattr__(self, name, value):
        raise AttributeError("WebMapService is read-only")

    def _gather_contents(self):
        # only named layers are addressable
        contents = OrderedDict()
        for layer in self.layer.walk():
            if not layer.name:
                continue
            if layer.name in contents:
                warnings.warn('Content metadata for layer "%s" already exists. Keeping the first one' % layer.name)
                continue
            contents[layer.name] = layer
        return MappingProxyType(contents)

    def __getitem__(self, name):
        ''' check contents dictionary to allow dict
        like access to service layers
        '''
        if name in self.contents:
            return self.contents[name]
        raise KeyError("No content named %s" % name)

    def items(self):
        return list(self.contents.items())

    @property
    def version(self):
        return self.capabilities.version

    @property
    def service(self):
        return self.capabilities.service

    @property
    def layer(self):
        return self.capabilities.layer

    @property
    def get_map_output_formats(self):
        return self.capabilities.get_map_output_formats

    @property
    def get_feature_info_output_formats(self):
        return self.capabilities.get_feature_info_output_formats

    @property
    def exception_formats(self):
        return self.capabilities.exception_formats

    @property
    def get_map_requests(self):
        return self.capabilities.get_map_requests

    @property
    def get_feature_info_requests(self):
        return self.capabilities.get_feature_info_requests

    @property
    def operations(self):
        return self.capabilities.operations

    @property
    def vendor_specific_capabilities(self):
        return self.capabilities.vendor_specific_capabilities

    def getOperationByName(self, name):
        """Return a named operation."""
        for item in self.operations:
            if item.name == name:
                return item
        raise KeyError("No operation named %s" % name)

    def get_request_url(self, operation="GetMap", method="Get"):
        '''
        URL advertised for an operation and HTTP method, the service URL when none is advertised
        '''
        try:
            methods = self.getOperationByName(operation).methods
        except KeyError:
            return self.url
        return next((m.url for m in methods if m.type.lower() == method.lower()), self.url)

    def getServiceXML(self):
        return etree.tostring(self._capabilities_root)


async def open_capabilities(url, version=None, fetch=None):
    '''
    Same as WebMapService(url, version, fetch=fetch) for callers running inside an event loop
    '''
    request = build_capabilities_url(url, version)
    document = await read_capabilities(request, fetch)
    return WebMapService._from_document(url, request, document)

"""Shared capabilities documents for the tests."""

import io

import pytest
from lxml import etree

WMS_111 = b"""<?xml version="1.0" encoding="UTF-8"?>
<WMT_MS_Capabilities version="1.1.1" xmlns:xlink="http://www.w3.org/1999/xlink">
  <Service>
    <Name>OGC:WMS</Name>
    <Title>Demo map server</Title>
    <Abstract>Roads and rivers</Abstract>
    <KeywordList>
      <Keyword>roads</Keyword>
      <Keyword>rivers</Keyword>
    </KeywordList>
    <OnlineResource xlink:type="simple" xlink:href="http://example.com/wms"/>
    <ContactInformation>
      <ContactPersonPrimary>
        <ContactPerson>Jo Doe</ContactPerson>
        <ContactOrganization>Example Org</ContactOrganization>
      </ContactPersonPrimary>
      <ContactPosition>Operator</ContactPosition>
      <ContactAddress>
        <AddressType>postal</AddressType>
        <Address>1 Main Street</Address>
        <City>Springfield</City>
        <StateOrProvince>North</StateOrProvince>
        <PostCode>12345</PostCode>
        <Country>Nowhere</Country>
      </ContactAddress>
      <ContactVoiceTelephone>+1 555 0100</ContactVoiceTelephone>
      <ContactFacsimileTelephone>+1 555 0101</ContactFacsimileTelephone>
      <ContactElectronicMailAddress>maps@example.com</ContactElectronicMailAddress>
    </ContactInformation>
    <Fees>none</Fees>
    <AccessConstraints>none</AccessConstraints>
  </Service>
  <Capability>
    <Request>
      <GetCapabilities>
        <Format>application/vnd.ogc.wms_xml</Format>
        <DCPType><HTTP><Get><OnlineResource xlink:href="http://example.com/wms?"/></Get></HTTP></DCPType>
      </GetCapabilities>
      <GetMap>
        <Format>image/png</Format>
        <Format>image/jpeg</Format>
        <DCPType>
          <HTTP>
            <Get><OnlineResource xlink:href="http://example.com/wms/get?"/></Get>
            <!-- post is served by another host -->
            <Post><OnlineResource xlink:href="http://example.com/wms/post"/></Post>
          </HTTP>
        </DCPType>
      </GetMap>
      <GetFeatureInfo>
        <Format>text/plain</Format>
        <Format>application/vnd.ogc.gml</Format>
        <DCPType><HTTP><Get><OnlineResource xlink:href="http://example.com/wms/info?"/></Get></HTTP></DCPType>
      </GetFeatureInfo>
    </Request>
    <Exception>
      <Format>application/vnd.ogc.se_xml</Format>
      <Format>application/vnd.ogc.se_inimage</Format>
    </Exception>
    <VendorSpecificCapabilities>
      <TileSet><SRS>EPSG:4326</SRS></TileSet>
    </VendorSpecificCapabilities>
    <Layer>
      <Title>Root</Title>
      <SRS>EPSG:4326</SRS>
      <LatLonBoundingBox minx="-180" miny="-90" maxx="180" maxy="90"/>
      <Layer queryable="1">
        <Name>roads</Name>
        <Title>Roads</Title>
        <Abstract>Main roads</Abstract>
        <KeywordList><Keyword>transport</Keyword></KeywordList>
        <SRS>EPSG:4326</SRS>
        <SRS>EPSG:3857</SRS>
        <LatLonBoundingBox minx="5.5" miny="47.2" maxx="15.1" maxy="55.1"/>
        <BoundingBox SRS="EPSG:3857" minx="612000" miny="5980000" maxx="1680000" maxy="7390000"/>
        <Style>
          <Name>default</Name>
          <Title>Default roads</Title>
          <Abstract>Red lines</Abstract>
          <LegendURL width="20" height="10">
            <Format>image/png</Format>
            <OnlineResource xlink:type="simple" xlink:href="http://example.com/legend/roads.png"/>
          </LegendURL>
          <StyleSheetURL>
            <Format>text/xml</Format>
            <OnlineResource xlink:type="simple" xlink:href="http://example.com/sld/roads.xml"/>
          </StyleSheetURL>
        </Style>
      </Layer>
      <Layer queryable="0">
        <Name>rivers</Name>
        <Title>Rivers</Title>
        <Dimension name="time" units="ISO8601" default="2020">2019, 2020</Dimension>
        <MetadataURL type="FGDC">
          <Format>text/xml</Format>
          <OnlineResource xlink:href="http://example.com/meta/rivers.xml"/>
        </MetadataURL>
      </Layer>
    </Layer>
  </Capability>
</WMT_MS_Capabilities>
"""

WMS_130 = b"""<?xml version="1.0" encoding="UTF-8"?>
<WMS_Capabilities version="1.3.0" xmlns="http://www.opengis.net/wms"
    xmlns:xlink="http://www.w3.org/1999/xlink"
    xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance">
  <Service>
    <Name>WMS</Name>
    <Title>Namespaced server</Title>
    <OnlineResource xlink:href="http://example.org/ows"/>
    <LayerLimit>16</LayerLimit>
    <MaxWidth>4096</MaxWidth>
    <MaxHeight>4096</MaxHeight>
  </Service>
  <Capability>
    <Request>
      <GetMap>
        <Format>image/png</Format>
        <DCPType><HTTP><Get><OnlineResource xlink:href="http://example.org/ows?"/></Get></HTTP></DCPType>
      </GetMap>
    </Request>
    <Layer queryable="1" opaque="1" fixedWidth="256">
      <Name>world</Name>
      <Title>World</Title>
      <SRS>EPSG:4326</SRS>
      <CRS>CRS:84</CRS>
      <EX_GeographicBoundingBox>
        <westBoundLongitude>-180</westBoundLongitude>
        <southBoundLatitude>-90</southBoundLatitude>
        <eastBoundLongitude>180</eastBoundLongitude>
        <northBoundLatitude>90</northBoundLatitude>
      </EX_GeographicBoundingBox>
      <BoundingBox CRS="EPSG:4326" minx="1" miny="2" maxx="3" maxy="4"/>
      <Style>
        <Name>plain</Name>
        <LegendUrl width="16">
          <Format>image/gif</Format>
          <OnlineResource xlink:href="http://example.org/legend.gif"/>
        </LegendUrl>
      </Style>
    </Layer>
  </Capability>
</WMS_Capabilities>
"""


def capabilities_xml(layers, version="1.1.1", namespace=None, request=None):
    """Build a minimal capabilities document around the given Layer markup."""
    if request is None:
        request = ("<Request><GetMap><Format>image/png</Format>"
                   "<DCPType><HTTP><Get><OnlineResource xlink:href=\"http://h/wms?\"/></Get></HTTP></DCPType>"
                   "</GetMap></Request>")
    xmlns = ' xmlns="%s"' % namespace if namespace else ""
    return ('<WMT_MS_Capabilities version="%s"%s xmlns:xlink="http://www.w3.org/1999/xlink">'
            "<Service><Title>t</Title></Service>"
            "<Capability>%s%s</Capability>"
            "</WMT_MS_Capabilities>" % (version, xmlns, request, layers)).encode("utf-8")


class ClosingBytesIO(io.BytesIO):
    """BytesIO remembering whether close() was called."""

    closed_by_reader = False

    def close(self):
        self.closed_by_reader = True
        super().close()


@pytest.fixture
def wms111_tree():
    return etree.fromstring(WMS_111)


@pytest.fixture
def wms130_tree():
    return etree.fromstring(WMS_130)


@pytest.fixture
def stream_fetch():
    """Fetcher serving a fixed document and recording the requested URLs."""

    def make(payload):
        calls = []
        streams = []

        async def fetch(url):
            calls.append(url)
            stream = ClosingBytesIO(payload)
            streams.append(stream)
            return stream

        fetch.calls = calls
        fetch.streams = streams
        return fetch

    return make

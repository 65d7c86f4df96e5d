"""
Download of capabilities documents.

A fetcher is any coroutine function taking a URL and returning a readable
binary stream. The default one performs a plain HTTP GET through owslib's
openURL; callers pass their own to add authentication, caching or retries.
"""
from __future__ import annotations

import asyncio
import io
import logging
import os
from typing import Awaitable, BinaryIO, Callable, Optional

from lxml import etree
from owslib.util import openURL

from subcommon import CapabilitiesDownloadError

log = logging.getLogger(__name__)

WMS_REQUEST_TIMEOUT_S = int(os.getenv("WMS_REQUEST_TIMEOUT_S", "30"))

Fetcher = Callable[[str], Awaitable[BinaryIO]]


def make_http_fetch(timeout=WMS_REQUEST_TIMEOUT_S, headers=None, username=None, password=None) -> Fetcher:
    """Return a fetcher issuing a single HTTP GET per call."""

    def get(url):
        u = openURL(url, method="Get", username=username, password=password,
                    timeout=timeout, headers=headers)
        return io.BytesIO(u.read())

    async def fetch(url):
        return await asyncio.to_thread(get, url)

    return fetch


default_fetch = make_http_fetch()


def xml_parser():
    # capabilities documents are untrusted: no entity expansion, no DTD downloads
    return etree.XMLParser(resolve_entities=False, no_network=True, remove_comments=True)


def load_document(stream):
    return etree.parse(stream, parser=xml_parser())


async def read_capabilities(url, fetch: Optional[Fetcher] = None):
    '''
    Fetch the capabilities document at url exactly once and load it as an lxml tree.
    The stream returned by the fetcher is closed whatever happens while loading.
    Any failure is reported as CapabilitiesDownloadError chained to the original cause.
    '''
    fetch = fetch or default_fetch
    log.debug("Requesting capabilities from %s", url)
    try:
        stream = await fetch(url)
    except Exception as exc:
        log.warning("Could not download capabilities from %s", url, exc_info=exc)
        raise CapabilitiesDownloadError(url) from exc

    try:
        return load_document(stream)
    except Exception as exc:
        log.warning("Could not download capabilities from %s", url, exc_info=exc)
        raise CapabilitiesDownloadError(url) from exc
    finally:
        stream.close()

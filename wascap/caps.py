"""
Well-known capability identifiers.

Capabilities are opaque strings to the embed/extract core; this vocabulary
only gives the CLI and API friendly names and shortcut flags.
"""

from __future__ import annotations

MESSAGING = "wascc:messaging"
KEY_VALUE = "wascc:keyvalue"
HTTP_SERVER = "wascc:http_server"
HTTP_CLIENT = "wascc:http_client"
BLOB = "wascc:blobstore"
EVENTSTREAMS = "wascc:eventstreams"
EXTRAS = "wascc:extras"
LOGGING = "wascc:logging"

CAPABILITY_NAMES = {
    MESSAGING: "Messaging",
    KEY_VALUE: "K/V Store",
    HTTP_SERVER: "HTTP Server",
    HTTP_CLIENT: "HTTP Client",
    BLOB: "Blob Store",
    EVENTSTREAMS: "Event Streams",
    EXTRAS: "Extras",
    LOGGING: "Logging",
}


def capability_name(cap: str) -> str:
    """Display name for *cap*; unknown capabilities are shown as-is."""
    return CAPABILITY_NAMES.get(cap, cap)

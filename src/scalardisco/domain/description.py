"""UPnP device description parsing for ScalarWebAPI devices.

A matching description carries the vendor ``X_ScalarWebAPI_DeviceInfo``
extension under the root ``device`` element. Each service of its service
list exposes a service type and the base URL of its action list; the two
are joined into the endpoint used to call that service.
"""

import logging
import xml.etree.ElementTree as ET

from scalardisco.domain.device import ScalarDevice

LOG = logging.getLogger(__name__)

UPNP_NS = "urn:schemas-upnp-org:device-1-0"
SCALAR_NS = "urn:schemas-sony-com:av"

_UPNP = f"{{{UPNP_NS}}}"
_SCALAR = f"{{{SCALAR_NS}}}"


class DescriptionError(ValueError):
    pass


def build_endpoint(base_url: str, service_type: str) -> str:
    if base_url.endswith("/"):
        return base_url + service_type
    return f"{base_url}/{service_type}"


def _text(parent: ET.Element, tag: str) -> str | None:
    node = parent.find(tag)
    if node is None or node.text is None:
        return None
    value = node.text.strip()
    return value or None


def _no_match(strict: bool, reason: str) -> None:
    if strict:
        raise DescriptionError(reason)
    LOG.debug("description rejected reason=%s", reason)
    return None


def parse_description(xml_text: str, strict: bool = False) -> ScalarDevice | None:
    """Build a ``ScalarDevice`` from a device description document.

    Returns ``None`` when the document does not describe a ScalarWebAPI
    device. With ``strict`` set, structural failures (invalid XML, missing
    required fields, an extension without usable services) raise
    ``DescriptionError`` instead; a plain UPnP device without the vendor
    extension is still reported as ``None``.
    """
    try:
        root = ET.fromstring(xml_text)
    except ET.ParseError as exc:
        return _no_match(strict, f"invalid XML: {exc}")

    device = root.find(f"{_UPNP}device")
    if device is None:
        LOG.debug("description rejected reason=no_device_element")
        return None

    info = device.find(f"{_SCALAR}X_ScalarWebAPI_DeviceInfo")
    if info is None:
        LOG.debug("description rejected reason=no_scalar_extension")
        return None

    friendly_name = _text(device, f"{_UPNP}friendlyName")
    model_name = _text(device, f"{_UPNP}modelName")
    udn = _text(device, f"{_UPNP}UDN")
    if friendly_name is None or model_name is None or udn is None:
        return _no_match(strict, "missing friendlyName, modelName or UDN")

    service_list = info.find(f"{_SCALAR}X_ScalarWebAPI_ServiceList")
    if service_list is None:
        return _no_match(strict, "missing X_ScalarWebAPI_ServiceList")

    endpoints: dict[str, str] = {}
    for service in service_list:
        service_type = _text(service, f"{_SCALAR}X_ScalarWebAPI_ServiceType")
        base_url = _text(service, f"{_SCALAR}X_ScalarWebAPI_ActionList_URL")
        if service_type is None or base_url is None:
            continue
        endpoints[service_type] = build_endpoint(base_url, service_type)

    if not endpoints:
        return _no_match(strict, "no endpoint found in service list")

    return ScalarDevice(
        udn=udn,
        model_name=model_name,
        friendly_name=friendly_name,
        endpoints=endpoints,
    )

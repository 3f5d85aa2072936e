import pytest

from scalardisco.domain.description import DescriptionError, build_endpoint, parse_description

_CAMERA_DD = """<?xml version="1.0"?>
<root xmlns="urn:schemas-upnp-org:device-1-0" xmlns:av="urn:schemas-sony-com:av">
  <specVersion><major>1</major><minor>0</minor></specVersion>
  <device>
    <deviceType>urn:schemas-upnp-org:device:Basic:1</deviceType>
    <friendlyName>DSC-QX10</friendlyName>
    <manufacturer>Sony Corporation</manufacturer>
    <modelName>SonyImagingDevice</modelName>
    <UDN>uuid:000000001000-1010-8000-62F1894EE7BE</UDN>
    <av:X_ScalarWebAPI_DeviceInfo>
      <av:X_ScalarWebAPI_Version>1.0</av:X_ScalarWebAPI_Version>
      <av:X_ScalarWebAPI_ServiceList>
        <av:X_ScalarWebAPI_Service>
          <av:X_ScalarWebAPI_ServiceType>guide</av:X_ScalarWebAPI_ServiceType>
          <av:X_ScalarWebAPI_ActionList_URL>http://10.0.0.1:10000/sony</av:X_ScalarWebAPI_ActionList_URL>
        </av:X_ScalarWebAPI_Service>
        <av:X_ScalarWebAPI_Service>
          <av:X_ScalarWebAPI_ServiceType>camera</av:X_ScalarWebAPI_ServiceType>
          <av:X_ScalarWebAPI_ActionList_URL>http://10.0.0.1:10000/sony/</av:X_ScalarWebAPI_ActionList_URL>
        </av:X_ScalarWebAPI_Service>
      </av:X_ScalarWebAPI_ServiceList>
    </av:X_ScalarWebAPI_DeviceInfo>
  </device>
</root>
"""

_PLAIN_UPNP_DD = """<?xml version="1.0"?>
<root xmlns="urn:schemas-upnp-org:device-1-0">
  <device>
    <friendlyName>Living room TV</friendlyName>
    <modelName>Renderer</modelName>
    <UDN>uuid:tv</UDN>
  </device>
</root>
"""


def _with_services(services: str) -> str:
    return f"""<root xmlns="urn:schemas-upnp-org:device-1-0" xmlns:av="urn:schemas-sony-com:av">
  <device>
    <friendlyName>ILCE-6000</friendlyName>
    <modelName>SonyImagingDevice</modelName>
    <UDN>uuid:cam</UDN>
    <av:X_ScalarWebAPI_DeviceInfo>
      <av:X_ScalarWebAPI_ServiceList>{services}</av:X_ScalarWebAPI_ServiceList>
    </av:X_ScalarWebAPI_DeviceInfo>
  </device>
</root>"""


def _service(service_type: str | None, url: str | None) -> str:
    parts = []
    if service_type is not None:
        parts.append(f"<av:X_ScalarWebAPI_ServiceType>{service_type}</av:X_ScalarWebAPI_ServiceType>")
    if url is not None:
        parts.append(f"<av:X_ScalarWebAPI_ActionList_URL>{url}</av:X_ScalarWebAPI_ActionList_URL>")
    return "<av:X_ScalarWebAPI_Service>" + "".join(parts) + "</av:X_ScalarWebAPI_Service>"


def test_parse_description_builds_device_record() -> None:
    device = parse_description(_CAMERA_DD)
    assert device is not None
    assert device.udn == "uuid:000000001000-1010-8000-62F1894EE7BE"
    assert device.friendly_name == "DSC-QX10"
    assert device.model_name == "SonyImagingDevice"
    assert dict(device.endpoints) == {
        "guide": "http://10.0.0.1:10000/sony/guide",
        "camera": "http://10.0.0.1:10000/sony/camera",
    }
    assert device.service_types == ["camera", "guide"]
    assert device.endpoint("camera") == "http://10.0.0.1:10000/sony/camera"
    assert device.endpoint("avContent") is None


def test_parse_description_is_idempotent() -> None:
    first = parse_description(_CAMERA_DD)
    second = parse_description(_CAMERA_DD)
    assert first is not None and second is not None
    assert first == second
    assert dict(first.endpoints) == dict(second.endpoints)


def test_build_endpoint_handles_trailing_slash() -> None:
    assert build_endpoint("http://host/api/", "camera") == "http://host/api/camera"
    assert build_endpoint("http://host/api", "camera") == "http://host/api/camera"


def test_parse_description_without_vendor_extension_is_no_match() -> None:
    assert parse_description(_PLAIN_UPNP_DD) is None
    assert parse_description(_PLAIN_UPNP_DD, strict=True) is None


def test_parse_description_without_device_element_is_no_match() -> None:
    assert parse_description('<root xmlns="urn:schemas-upnp-org:device-1-0"/>') is None


def test_parse_description_with_only_incomplete_services_is_no_match() -> None:
    doc = _with_services(_service("camera", None) + _service(None, "http://host/sony"))
    assert parse_description(doc) is None


def test_parse_description_with_empty_service_list_raises_in_strict_mode() -> None:
    doc = _with_services(_service("camera", "  "))
    with pytest.raises(DescriptionError, match="no endpoint"):
        parse_description(doc, strict=True)


def test_parse_description_skips_incomplete_service_entries() -> None:
    doc = _with_services(
        _service("camera", "http://host/sony") + _service("system", None) + _service(None, "x")
    )
    device = parse_description(doc)
    assert device is not None
    assert dict(device.endpoints) == {"camera": "http://host/sony/camera"}


def test_parse_description_duplicate_service_type_keeps_last() -> None:
    doc = _with_services(
        _service("camera", "http://host/old") + _service("camera", "http://host/new/")
    )
    device = parse_description(doc)
    assert device is not None
    assert dict(device.endpoints) == {"camera": "http://host/new/camera"}


def test_parse_description_trims_whitespace_around_values() -> None:
    doc = _with_services(_service("\n  camera  \n", "\n  http://host/sony  \n"))
    device = parse_description(doc)
    assert device is not None
    assert dict(device.endpoints) == {"camera": "http://host/sony/camera"}


def test_parse_description_malformed_xml_is_no_match_unless_strict() -> None:
    assert parse_description("<root><device>") is None
    assert parse_description("") is None
    with pytest.raises(DescriptionError, match="invalid XML"):
        parse_description("<root><device>", strict=True)


def test_parse_description_missing_required_fields() -> None:
    doc = _with_services(_service("camera", "http://host/sony")).replace(
        "<UDN>uuid:cam</UDN>", ""
    )
    assert parse_description(doc) is None
    with pytest.raises(DescriptionError, match="UDN"):
        parse_description(doc, strict=True)


def test_device_record_endpoints_are_read_only() -> None:
    device = parse_description(_CAMERA_DD)
    assert device is not None
    with pytest.raises(TypeError):
        device.endpoints["camera"] = "http://elsewhere"  # type: ignore[index]

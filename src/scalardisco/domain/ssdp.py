from itertools import islice

SSDP_GROUP = "239.255.255.250"
SSDP_PORT = 1900
SSDP_ADDR = (SSDP_GROUP, SSDP_PORT)
RESULT_BUFFER = 8192

ST_ALL = "ssdp:all"
ST_SCALAR_WEBAPI = "urn:schemas-sony-com:service:ScalarWebAPI:1"

DEFAULT_MX = 1
DEFAULT_TIMEOUT_S = 5.0
MIN_TIMEOUT_S = 2.0
MAX_RESPONSE_LINES = 20

_STATUS_OK = "HTTP/1.1 200 OK"


def build_msearch(st: str, mx: int = DEFAULT_MX) -> bytes:
    if not st:
        raise ValueError("search target must not be empty")
    if int(mx) < 0:
        raise ValueError(f"MX must be a non-negative integer: {mx}")
    return "\r\n".join(
        [
            "M-SEARCH * HTTP/1.1",
            f"HOST: {SSDP_GROUP}:{SSDP_PORT}",
            'MAN: "ssdp:discover"',
            f"MX: {int(mx)}",
            f"ST: {st}",
            "",
            "",
        ]
    ).encode("utf-8")


def parse_location(response: str, max_lines: int = MAX_RESPONSE_LINES) -> str | None:
    """Return the LOCATION header of an SSDP search response.

    Only ``HTTP/1.1 200 OK`` responses are considered. At most ``max_lines``
    header lines are read, so an oversized reply cannot keep us scanning.
    """
    lines = iter(response.splitlines())
    if next(lines, None) != _STATUS_OK:
        return None

    for line in islice(lines, max_lines):
        if line == "":
            break
        divider = line.find(":")
        if divider < 1:
            continue
        if line[:divider].strip().lower() == "location":
            return line[divider + 1 :].strip()
    return None


def clamp_timeout(timeout_s: float | None) -> float:
    if timeout_s is None:
        return max(MIN_TIMEOUT_S, DEFAULT_TIMEOUT_S)
    return max(MIN_TIMEOUT_S, float(timeout_s))

from collections.abc import Mapping
from ipaddress import ip_address

from starlette.requests import Request

from abuse_guard.api.modules.inspection.schema import RequestSignals
from abuse_guard.settings import InspectionConfig

_FORWARDED_HEADERS = ("cf-connecting-ip", "x-forwarded-for", "x-real-ip")


def normalize_headers(headers: Mapping[str, str] | None) -> dict[str, str]:
    if not headers:
        return {}
    return {str(k).lower(): str(v) for k, v in headers.items() if v}


def normalize_ip(value: str | None) -> str | None:
    if not value:
        return None

    candidate = value.split(",", 1)[0].strip()
    try:
        return str(ip_address(candidate))
    except ValueError:
        return None


def request_path(request: Request) -> str:
    query = request.url.query
    return f"{request.url.path}?{query}" if query else request.url.path


class RequestIpResolver:
    def __init__(self, config: InspectionConfig):
        self._trust_forwarded_ip = config.trust_forwarded_ip

    def get_request_ip(self, request: Request) -> str | None:
        if self._trust_forwarded_ip:
            for header in _FORWARDED_HEADERS:
                ip = normalize_ip(request.headers.get(header))
                if ip:
                    return ip

        if request.client and request.client.host:
            return normalize_ip(request.client.host)

        return None


class RequestSignalsReader:
    def __init__(self, ip_resolver: RequestIpResolver):
        self._ip_resolver = ip_resolver

    def read(self, request: Request) -> RequestSignals:
        return RequestSignals(
            ip_address=self._ip_resolver.get_request_ip(request),
            path=request_path(request),
            headers=normalize_headers(request.headers),
        )


__all__ = (
    "RequestIpResolver",
    "RequestSignalsReader",
    "normalize_headers",
    "normalize_ip",
    "request_path",
)

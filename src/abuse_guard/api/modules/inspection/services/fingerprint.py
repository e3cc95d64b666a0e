from hashlib import sha256

from abuse_guard.api.modules.inspection.schema import RequestSignals

FINGERPRINT_HEADERS = (
    "user-agent",
    "accept-language",
    "accept-encoding",
    "sec-ch-ua",
    "sec-ch-ua-platform",
    "sec-fetch-site",
    "sec-fetch-mode",
    "sec-fetch-dest",
)
_SEPARATOR = "|"


def build_fingerprint(signals: RequestSignals) -> str:
    """Best-effort device identity: a hex SHA-256 over header values and the address.

    Missing values are skipped, never replaced by placeholders, so two requests
    that differ only in which optional headers they send get different digests.
    """
    parts = [signals.headers.get(name) for name in FINGERPRINT_HEADERS]
    parts.append(signals.ip_address)
    raw = _SEPARATOR.join(part for part in parts if part)
    return sha256(raw.encode("utf-8")).hexdigest()


__all__ = ("FINGERPRINT_HEADERS", "build_fingerprint")

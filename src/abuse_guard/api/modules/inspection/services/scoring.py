from collections.abc import Iterable

from abuse_guard.settings import InspectionConfig

HIT_VOLUME_WARN_THRESHOLD = 10
HIT_VOLUME_WARN_WEIGHT = 30
HIT_VOLUME_CRITICAL_THRESHOLD = 20
HIT_VOLUME_CRITICAL_WEIGHT = 40
SCRIPTING_CLIENT_WEIGHT = 40
MISSING_ACCEPT_WEIGHT = 20
ADMIN_PATH_WEIGHT = 30

DEFAULT_SCRIPTING_MARKERS = ("curl",)
DEFAULT_ADMIN_MARKERS = ("admin",)


def contains_any(value: str, markers: Iterable[str]) -> bool:
    lowered = value.lower()
    return any(marker.lower() in lowered for marker in markers if marker)


def score_request(
    hit_count: int,
    user_agent: str,
    accept_present: bool,
    path: str,
    scripting_markers: Iterable[str] = DEFAULT_SCRIPTING_MARKERS,
    admin_markers: Iterable[str] = DEFAULT_ADMIN_MARKERS,
) -> int:
    score = 0

    if hit_count > HIT_VOLUME_WARN_THRESHOLD:
        score += HIT_VOLUME_WARN_WEIGHT
    if hit_count > HIT_VOLUME_CRITICAL_THRESHOLD:
        score += HIT_VOLUME_CRITICAL_WEIGHT

    if contains_any(user_agent or "", scripting_markers):
        score += SCRIPTING_CLIENT_WEIGHT

    if not accept_present:
        score += MISSING_ACCEPT_WEIGHT

    if contains_any(path or "", admin_markers):
        score += ADMIN_PATH_WEIGHT

    return score


class RiskScorer:
    """Additive request scoring with marker lists taken from configuration."""

    def __init__(self, config: InspectionConfig):
        self._scripting_markers = tuple(config.scripting_user_agent_markers)
        self._admin_markers = tuple(config.admin_path_markers)

    def score(
        self,
        hit_count: int,
        user_agent: str,
        accept_present: bool,
        path: str,
    ) -> int:
        return score_request(
            hit_count=hit_count,
            user_agent=user_agent,
            accept_present=accept_present,
            path=path,
            scripting_markers=self._scripting_markers,
            admin_markers=self._admin_markers,
        )


__all__ = ("RiskScorer", "contains_any", "score_request")

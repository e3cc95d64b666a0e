import pytest

from abuse_guard.api.modules.inspection.services import RiskScorer, score_request
from abuse_guard.settings import InspectionConfig


def test_scripting_client_adds_to_volume():
    score = score_request(
        hit_count=11,
        user_agent="curl/8.0",
        accept_present=True,
        path="/v1/items",
    )

    assert score == 30 + 40


def test_volume_only_without_scripting_markers():
    assert (
        score_request(
            hit_count=11,
            user_agent="curl/8.0",
            accept_present=True,
            path="/v1/items",
            scripting_markers=(),
        )
        == 30
    )


def test_every_rule_fires():
    score = score_request(
        hit_count=21,
        user_agent="curl/8.0",
        accept_present=False,
        path="/admin/reset",
    )

    assert score == 30 + 40 + 40 + 20 + 30 == 160


@pytest.mark.parametrize(
    ("hit_count", "expected"),
    [(0, 0), (10, 0), (11, 30), (20, 30), (21, 70), (500, 70)],
)
def test_volume_thresholds(hit_count, expected):
    assert (
        score_request(
            hit_count=hit_count,
            user_agent="Mozilla/5.0",
            accept_present=True,
            path="/",
        )
        == expected
    )


def test_markers_are_case_insensitive():
    assert (
        score_request(
            hit_count=1,
            user_agent="CURL/7.88",
            accept_present=True,
            path="/ADMIN",
        )
        == 70
    )


def test_scorer_uses_configured_markers():
    scorer = RiskScorer(
        InspectionConfig(
            scripting_user_agent_markers=["python-requests"],
            admin_path_markers=["internal"],
        )
    )

    assert scorer.score(1, "python-requests/2.31", True, "/internal/jobs") == 70
    assert scorer.score(1, "curl/8.0", True, "/admin") == 0

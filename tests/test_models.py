import pytest

from leaderboard.ingest import bot_usernames, is_bot, load_activity_definitions
from leaderboard.ingest.models import (
    ActivityDefinition,
    ContributorBadge,
    DurationValue,
    NumberValue,
    StringValue,
    dump_aggregate_value,
    load_aggregate_value,
)


def test_aggregate_value_payloads():
    assert dump_aggregate_value(DurationValue(1500)) == {"type": "duration", "value": 1500}
    assert load_aggregate_value({"type": "duration", "value": 1500}) == DurationValue(1500)
    assert load_aggregate_value({"type": "number", "value": 2.5}) == NumberValue(2.5)
    assert load_aggregate_value({"type": "string", "value": "fast"}) == StringValue("fast")
    assert load_aggregate_value(None) is None


def test_unknown_aggregate_value_type_is_rejected():
    with pytest.raises(ValueError):
        load_aggregate_value({"type": "percentage", "value": 10})


def test_contributor_badge_slug():
    badge = ContributorBadge("problem_solving", "alice", "2x", achieved_on=None)
    assert badge.slug == "problem_solving__alice__2x"


def test_activity_definitions_cover_every_kind():
    definitions = load_activity_definitions()
    assert {d.slug for d in definitions} == set(ActivityDefinition)
    merged = next(d for d in definitions if d.slug is ActivityDefinition.PR_MERGED)
    assert merged.points == 7
    assert merged.icon == "git-merge"


def test_bot_detection(merged_pr):
    assert is_bot("dependabot[bot]")
    assert is_bot("Renovate[BOT]")
    assert not is_bot("bottle")
    activities = [merged_pr("alice"), merged_pr("dependabot[bot]"), merged_pr("dependabot[bot]")]
    assert bot_usernames(activities) == ["dependabot[bot]"]

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from rankfeed.models import FantasyCalcPlayer, KtcPlayer, RankingsResult, UnderdogPlayer


def test_player_record_is_frozen():
    record = UnderdogPlayer(rank=1, name="Test Player", position="WR", team="CIN", adp=1, original_rank=1)

    with pytest.raises((TypeError, ValidationError)):
        record.rank = 2  # type: ignore[misc]


def test_player_record_rejects_empty_name_and_zero_rank():
    with pytest.raises(ValidationError):
        UnderdogPlayer(rank=1, name="", position="WR", team="CIN", adp=1, original_rank=1)
    with pytest.raises(ValidationError):
        UnderdogPlayer(rank=0, name="Zero", position="WR", team="CIN", adp=1, original_rank=1)


def test_result_total_must_match_players():
    player = KtcPlayer(rank=1, name="A", position="QB", team="BUF", value=9000)

    with pytest.raises(ValidationError):
        RankingsResult(
            last_updated=datetime.now(timezone.utc),
            source="ktc",
            total_players=2,
            players=[player],
        )


def test_payload_uses_camel_case_and_omits_unset_headers():
    moment = datetime(2026, 10, 18, 9, 30, tzinfo=timezone.utc)
    player = FantasyCalcPlayer(rank=1, name="A", position="QB", team="BUF", value=9000, trend_30_day=15)
    result = RankingsResult.build("fantasycalc", [player], format="dynasty_1qb", last_updated=moment)

    payload = result.to_payload()

    assert payload["lastUpdated"].startswith("2026-10-18T09:30:00")
    assert payload["format"] == "dynasty_1qb"
    assert "formatName" not in payload
    assert "slate" not in payload
    assert payload["totalPlayers"] == 1
    row = payload["players"][0]
    assert row["trend30Day"] == 15
    assert row["positionRank"] == 0
    assert row["sleeperId"] is None
    assert row["isStarter"] is False


def test_underdog_payload_fields():
    player = UnderdogPlayer(rank=3, name="A", position="RB", team="N/A", adp=15, original_rank=4)
    payload = RankingsResult.build("underdog", [player], slate="Best Ball").to_payload()

    assert payload["slate"] == "Best Ball"
    assert "format" not in payload
    assert payload["players"][0] == {
        "rank": 3,
        "name": "A",
        "position": "RB",
        "team": "N/A",
        "adp": 15,
        "originalRank": 4,
    }

import json
from pathlib import Path

import httpx
import pytest

from rankfeed.config import FANTASYCALC_FORMATS, KTC_FORMATS
from rankfeed.config_loader import ConfigurationError, Settings
from rankfeed.fetch import run_sources


UNDERDOG_URL = "https://app.underdogfantasy.com/rankings/download/slate/user/session"

UNDERDOG_CSV = """id,firstName,lastName,adp,slotName,teamName
1,Ja'Marr,Chase,1.1,WR,CIN
2,Bijan,Robinson,1.2,RB,ATL
"""


def _ktc_html(value_field: str) -> str:
    entries = [
        {"playerID": 1, "playerName": "Josh Allen", "position": "QB", "team": "BUF", value_field: {"value": 9000, "rank": 3}},
        {"playerID": 2, "playerName": "Bijan Robinson", "position": "RB", "team": "ATL", value_field: {"value": 9500, "rank": 1}},
    ]
    return f"<script>var playersArray = {json.dumps(entries)};</script>"


def _fantasycalc_payload():
    return [
        {"player": {"name": "Josh Allen", "position": "QB", "maybeTeam": "BUF"}, "value": 10000, "overallRank": 1},
        {"player": {"name": "Some Kicker", "position": "K"}, "value": 10, "overallRank": 2},
    ]


def _settings(tmp_path: Path, **overrides) -> Settings:
    base = Settings(data_dir=tmp_path, underdog_csv_url=UNDERDOG_URL, page_delay=0)
    return base.with_overrides(**overrides)


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.mark.anyio
async def test_underdog_run_writes_snapshots(tmp_path: Path):
    def handle(request: httpx.Request) -> httpx.Response:
        assert str(request.url) == UNDERDOG_URL
        return httpx.Response(200, text=UNDERDOG_CSV)

    async with _client(handle) as client:
        [summary] = await run_sources(_settings(tmp_path), "underdog", client=client)

    assert not summary.fatal
    assert summary.outcomes[0].players == 2
    latest = json.loads((tmp_path / "processed" / "underdog" / "rankings-latest.json").read_text())
    assert latest["source"] == "underdog"
    assert latest["slate"] == "NFL 2026 Pre-Draft Best Ball"
    assert [p["name"] for p in latest["players"]] == ["Ja'Marr Chase", "Bijan Robinson"]
    raw_files = list((tmp_path / "raw" / "underdog").glob("underdog-*.csv"))
    assert len(raw_files) == 1
    assert raw_files[0].read_text() == UNDERDOG_CSV


@pytest.mark.anyio
async def test_http_500_leaves_latest_untouched(tmp_path: Path):
    responses = iter([httpx.Response(200, text=UNDERDOG_CSV), httpx.Response(500, text="boom")])

    def handle(request: httpx.Request) -> httpx.Response:
        return next(responses)

    latest_path = tmp_path / "processed" / "underdog" / "rankings-latest.json"
    async with _client(handle) as client:
        await run_sources(_settings(tmp_path), "underdog", client=client)
        before = latest_path.read_bytes()
        [summary] = await run_sources(_settings(tmp_path), "underdog", client=client)

    assert summary.fatal
    assert "status: 500" in summary.outcomes[0].error
    assert latest_path.read_bytes() == before


@pytest.mark.anyio
async def test_missing_underdog_url_raises_before_requests(tmp_path: Path):
    def handle(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    settings = Settings(data_dir=tmp_path)
    async with _client(handle) as client:
        with pytest.raises(ConfigurationError):
            await run_sources(settings, "all", client=client)

    assert not (tmp_path / "processed").exists()


@pytest.mark.anyio
async def test_ktc_failures_are_isolated_per_format(tmp_path: Path):
    by_page = {
        ("/dynasty-rankings", "1"): KTC_FORMATS[0],
        ("/dynasty-rankings", "0"): KTC_FORMATS[1],
        ("/fantasy-rankings", "1"): KTC_FORMATS[2],
        ("/fantasy-rankings", "2"): KTC_FORMATS[3],
    }

    def handle(request: httpx.Request) -> httpx.Response:
        fmt = by_page[(request.url.path, request.url.params["format"])]
        if fmt.key == "redraft_superflex":
            return httpx.Response(503)
        if fmt.key == "redraft_1qb":
            return httpx.Response(200, text="<html>no data</html>")
        return httpx.Response(200, text=_ktc_html(fmt.value_field))

    async with _client(handle) as client:
        [summary] = await run_sources(_settings(tmp_path), "ktc", client=client)

    outcomes = {outcome.key: outcome for outcome in summary.outcomes}
    assert outcomes["dynasty_1qb"].success and outcomes["dynasty_1qb"].players == 2
    assert outcomes["dynasty_superflex"].success
    assert not outcomes["redraft_1qb"].success
    assert "playersArray" in outcomes["redraft_1qb"].error
    assert not outcomes["redraft_superflex"].success
    assert not summary.fatal

    processed = tmp_path / "processed" / "ktc"
    latest = json.loads((processed / "rankings-dynasty_1qb-latest.json").read_text())
    assert [(p["rank"], p["name"]) for p in latest["players"]] == [(1, "Bijan Robinson"), (2, "Josh Allen")]
    assert not (processed / "rankings-redraft_1qb-latest.json").exists()


@pytest.mark.anyio
async def test_fantasycalc_run_saves_api_response_as_raw(tmp_path: Path):
    requested = []

    def handle(request: httpx.Request) -> httpx.Response:
        requested.append(request.url.params["numQbs"])
        return httpx.Response(200, json=_fantasycalc_payload())

    async with _client(handle) as client:
        [summary] = await run_sources(_settings(tmp_path), "fantasycalc", client=client)

    assert len(requested) == len(FANTASYCALC_FORMATS)
    assert all(outcome.success and outcome.players == 1 for outcome in summary.outcomes)
    raw_files = list((tmp_path / "raw" / "fantasycalc" / "dynasty_2qb").glob("fantasycalc-*.json"))
    assert json.loads(raw_files[0].read_text()) == _fantasycalc_payload()
    csv_text = (tmp_path / "processed" / "fantasycalc" / "rankings-dynasty_2qb-latest.csv").read_text()
    assert csv_text.splitlines()[1] == "1,Josh Allen,QB,BUF,10000,0,,,"


@pytest.mark.anyio
async def test_fantasycalc_invalid_shape_is_recorded(tmp_path: Path):
    def handle(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"message": "unavailable"})

    async with _client(handle) as client:
        [summary] = await run_sources(_settings(tmp_path), "fantasycalc", client=client)

    assert len(summary.failed) == len(FANTASYCALC_FORMATS)
    assert all("expected array" in outcome.error for outcome in summary.failed)


@pytest.mark.anyio
async def test_fantasycalc_malformed_entries_do_not_fail_formats(tmp_path: Path):
    payload = [{"player": "oops"}, {"player": ["Josh Allen"]}] + _fantasycalc_payload()

    def handle(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=payload)

    async with _client(handle) as client:
        [summary] = await run_sources(_settings(tmp_path), "fantasycalc", client=client)

    assert len(summary.outcomes) == len(FANTASYCALC_FORMATS)
    assert all(outcome.success and outcome.players == 1 for outcome in summary.outcomes)


@pytest.mark.anyio
async def test_all_runs_sources_in_order(tmp_path: Path):
    hosts = []

    def handle(request: httpx.Request) -> httpx.Response:
        hosts.append(request.url.host)
        if request.url.host == "app.underdogfantasy.com":
            return httpx.Response(200, text=UNDERDOG_CSV)
        if request.url.host == "keeptradecut.com":
            return httpx.Response(200, text=_ktc_html("oneQBValues"))
        return httpx.Response(200, json=_fantasycalc_payload())

    async with _client(handle) as client:
        summaries = await run_sources(_settings(tmp_path), "all", client=client)

    assert [summary.source for summary in summaries] == ["underdog", "ktc", "fantasycalc"]
    assert hosts == ["app.underdogfantasy.com"] + ["keeptradecut.com"] * 4 + ["api.fantasycalc.com"] * 4

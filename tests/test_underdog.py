import pytest

from rankfeed.ingest import UnderdogColumns, convert_adp, parse_underdog_csv


ADAPTIVE_CSV = """id,firstName,lastName,adp,slotName,teamName,positionRank
1,Ja'Marr,Chase,1.1,WR,Cincinnati Bengals,WR1
2,Bijan,Robinson,1.2,RB,Atlanta Falcons,RB1
3,Justin,Jefferson,2.3,WR,Minnesota Vikings,WR2
4,Some,Linebacker,3.1,LB,Nowhere,LB1
5,Josh,Allen,42,QB,Buffalo Bills,QB1
"""


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("2.3", 15),
        ("1.1", 1),
        ("42", 42),
        ("17.5", (17 - 1) * 12 + 5),
        ("", None),
        ("n/a", None),
    ],
)
def test_convert_adp(raw, expected):
    assert convert_adp(raw) == expected


def test_detect_columns_falls_back_on_rank_collision():
    header = ["id", "firstName", "lastName", "adp", "slotName", "teamName", "positionRank"]
    columns = UnderdogColumns.detect(header)

    # "positionRank" is picked as the rank column, so position detection
    # collides with it and falls back to the default index.
    assert columns.rank == 6
    assert columns.position == 4
    assert columns.first_name == 1
    assert columns.last_name == 2
    assert columns.adp == 3
    assert columns.team == 5


def test_detect_columns_defaults_when_header_unrecognized():
    assert UnderdogColumns.detect(["a", "b", "c"]) == UnderdogColumns()


def test_adaptive_layout_builds_players():
    result = parse_underdog_csv(ADAPTIVE_CSV, layout="adaptive", slate="Best Ball")

    assert result.source == "underdog"
    assert result.slate == "Best Ball"
    assert result.total_players == len(result.players) == 4

    first = result.players[0]
    assert first.name == "Ja'Marr Chase"
    assert first.position == "WR"
    assert first.team == "Cincinnati Bengals"
    assert first.adp == 1
    # rank column holds "WR1", which is not a number; the line index is used.
    assert first.rank == 1
    assert first.original_rank == 1

    jefferson = result.players[2]
    assert jefferson.adp == 15

    allen = result.players[3]
    assert allen.name == "Josh Allen"
    assert allen.adp == 42
    assert allen.original_rank == 5


def test_adaptive_layout_strips_non_letters_from_position():
    csv_text = "rank,first,last,adp,position,team\n1,Travis,Kelce,3.4,TE1,KC\n2,Kansas City,,5.5,DST-1,KC\n"
    result = parse_underdog_csv(csv_text, layout="adaptive")

    assert [p.position for p in result.players] == ["TE", "DST"]
    assert result.players[1].name == "Kansas City"


def test_adaptive_layout_uses_rank_column_when_numeric():
    csv_text = "rank,first,last,adp,position,team\n7,Puka,Nacua,1.7,WR,LAR\n"
    result = parse_underdog_csv(csv_text, layout="adaptive")

    assert result.players[0].rank == 7
    assert result.players[0].original_rank == 1


def test_adaptive_layout_adp_defaults_to_rank():
    csv_text = "rank,first,last,adp,position,team\n9,Breece,Hall,,RB,\n"
    player = parse_underdog_csv(csv_text, layout="adaptive").players[0]

    assert player.adp == 9
    assert player.team == "N/A"


def test_fixed_layout_reads_rank_name_position_team():
    csv_text = (
        "Rank,Player,Position,Team,FPTS,Bye\n"
        '1,"Chase, Ja\'Marr",WR,CIN,300,10\n'
        "x,CeeDee Lamb,WR,DAL,290,7\n"
        "3,,RB,ATL,280,12\n"
        "4,Short\n"
        "\n"
        "6,Kyren Williams,RB,,250,6\n"
    )
    result = parse_underdog_csv(csv_text, layout="fixed")

    assert [p.name for p in result.players] == ["Chase, Ja'Marr", "CeeDee Lamb", "Kyren Williams"]
    assert [p.rank for p in result.players] == [1, 2, 6]
    assert [p.adp for p in result.players] == [1, 2, 6]
    assert [p.original_rank for p in result.players] == [1, 2, 6]
    assert result.players[2].team == "N/A"
    assert result.total_players == 3


def test_empty_csv_yields_empty_result():
    result = parse_underdog_csv("   \n", layout="adaptive")
    assert result.total_players == 0
    assert result.players == []


def test_unknown_layout_raises():
    with pytest.raises(ValueError):
        parse_underdog_csv("a,b\n", layout="sideways")

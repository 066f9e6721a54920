from rankfeed.ingest import parse_csv_line


def test_quoted_field_keeps_comma():
    assert parse_csv_line('1,"Smith, John",WR,KC') == ["1", "Smith, John", "WR", "KC"]


def test_unquoted_fields_are_trimmed():
    assert parse_csv_line(" 12 , Josh Allen ,QB, BUF ") == ["12", "Josh Allen", "QB", "BUF"]


def test_trailing_comma_emits_empty_field():
    assert parse_csv_line("1,Name,,") == ["1", "Name", "", ""]


def test_unbalanced_quote_merges_remaining_fields():
    assert parse_csv_line('1,"Open,WR,KC') == ["1", "Open,WR,KC"]


def test_empty_line_yields_single_empty_field():
    assert parse_csv_line("") == [""]

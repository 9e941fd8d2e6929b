import io

import pytest
from openpyxl import Workbook

from checkin.services.roster_ingest import (
    RosterError,
    first_present,
    normalize_header,
    parse_roster,
    row_to_member,
)


def _xlsx(rows: list[list]) -> bytes:
    wb = Workbook()
    ws = wb.active
    for row in rows:
        ws.append(row)
    output = io.BytesIO()
    wb.save(output)
    return output.getvalue()


def test_csv_with_first_last_and_cell_phone() -> None:
    content = (
        "First,Last,Cell Phone,Email\n"
        "Ada,Lovelace,(555) 123-4567,ada@example.com\n"
        "Alan,Turing,555.987.6543,\n"
    ).encode()

    members = parse_roster("roster.csv", content, "phone")

    assert [(m.identity_key, m.name) for m in members] == [
        ("5551234567", "Ada Lovelace"),
        ("5559876543", "Alan Turing"),
    ]
    assert members[0].email == "ada@example.com"
    assert members[1].email is None


def test_csv_with_alternate_headers_and_bom() -> None:
    content = "\ufeffFirst Name, Last Name ,Phone,Member ID\nGrace,Hopper,+1 555 000 1111,42\n".encode()

    members = parse_roster("ROSTER.CSV", content, "phone")

    assert len(members) == 1
    assert members[0].identity_key == "5550001111"
    assert members[0].name == "Grace Hopper"
    assert members[0].member_id == "42"


def test_rows_without_valid_phone_are_dropped() -> None:
    content = (
        "Name,Phone\n"
        "Ada Lovelace,555-123-4567\n"
        "No Phone,\n"
        "Short Phone,12345\n"
        ",5559876543\n"
    ).encode()

    members = parse_roster("roster.csv", content, "phone")

    assert [m.name for m in members] == ["Ada Lovelace"]


def test_duplicate_identity_keeps_first_row() -> None:
    content = "Name,Phone\nAda,5551234567\nImpostor,(555) 123-4567\n".encode()

    members = parse_roster("roster.csv", content, "phone")

    assert [m.name for m in members] == ["Ada"]


def test_name_mode_keys_by_normalized_name() -> None:
    content = "Full Name,Email\n  Ada  Lovelace ,ada@example.com\nada lovelace,dup@example.com\n,x@example.com\n".encode()

    members = parse_roster("roster.csv", content, "name")

    assert len(members) == 1
    assert members[0].identity_key == "ada lovelace"
    assert members[0].name == "Ada  Lovelace"


def test_no_usable_rows_returns_empty_list() -> None:
    assert parse_roster("roster.csv", b"Name,Phone\nAda,\n", "phone") == []


def test_xlsx_with_numeric_phone_cells() -> None:
    content = _xlsx([
        ["First", "Last", "Cell Phone"],
        ["Ada", "Lovelace", 5551234567],
        ["Alan", "Turing", 5559876543.0],
        [None, None, None],
    ])

    members = parse_roster("roster.xlsx", content, "phone")

    assert [(m.identity_key, m.name) for m in members] == [
        ("5551234567", "Ada Lovelace"),
        ("5559876543", "Alan Turing"),
    ]


@pytest.mark.parametrize(
    "filename, content",
    [
        ("roster.txt", b"Name,Phone\n"),
        ("roster.csv", b""),
        ("roster.csv", b"\xff\xfe\x00garbage"),
        ("roster.xlsx", b"not a workbook"),
    ],
)
def test_unreadable_files_raise(filename: str, content: bytes) -> None:
    with pytest.raises(RosterError):
        parse_roster(filename, content, "phone")


def test_header_normalization() -> None:
    assert normalize_header("  Cell_Phone ") == "cell phone"
    assert normalize_header("FIRST   NAME") == "first name"


def test_first_present_skips_empty_values() -> None:
    row = {"cell phone": "", "phone": "5551234567", "mobile": "5550000000"}

    assert first_present(row, ("cell phone", "phone", "mobile")) == "5551234567"
    assert first_present(row, ("cell",)) is None


def test_full_name_wins_over_parts() -> None:
    member = row_to_member({"name": "Dr. Ada", "first": "Ada", "last": "L", "phone": "5551234567"}, "phone")

    assert member.name == "Dr. Ada"


def test_csv_field_over_parser_limit_raises() -> None:
    content = ("Name,Phone\n" + "A" * 200000 + ",5551234567\n").encode()

    with pytest.raises(RosterError):
        parse_roster("roster.csv", content, "phone")

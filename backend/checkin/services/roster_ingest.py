"""
Roster ingestion.

Turns an uploaded CSV or XLSX file into Member records. Spreadsheets in the
wild name their columns differently ("First" vs "First Name", "Cell Phone"
vs "Phone"), so every field is looked up through an ordered list of
candidate headers and the first non-empty value wins. Rows that do not
yield a usable identity are dropped.
"""

import csv
import io
import logging
from typing import Dict, Iterable, List, Optional

from openpyxl import load_workbook

from checkin.models.session import Member
from checkin.utils.identity import PHONE, normalize_identity

logger = logging.getLogger(__name__)

FIRST_NAME_KEYS = ("first", "first name", "firstname")
LAST_NAME_KEYS = ("last", "last name", "lastname", "surname")
FULL_NAME_KEYS = ("name", "full name", "fullname")
PHONE_KEYS = ("cell phone", "phone", "mobile", "cell", "phone number")
EMAIL_KEYS = ("email", "e-mail", "email address")
MEMBER_ID_KEYS = ("id", "member id", "memberid", "roll number", "roll no")


class RosterError(ValueError):
    """The upload could not be read as a roster."""


def normalize_header(header) -> str:
    return " ".join(str(header).replace("_", " ").split()).lower()


def cell_text(value) -> str:
    """Spreadsheet cells come back as numbers too; 5551234567.0 must stay digits"""
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def first_present(row: Dict[str, str], candidates: Iterable[str]) -> Optional[str]:
    for key in candidates:
        value = row.get(key)
        if value:
            return value
    return None


def row_to_member(row: Dict[str, str], mode: str) -> Optional[Member]:
    """Build a Member from a header-normalized row, or None if it is unusable"""
    name = first_present(row, FULL_NAME_KEYS)
    if not name:
        parts = [first_present(row, FIRST_NAME_KEYS), first_present(row, LAST_NAME_KEYS)]
        name = " ".join(p for p in parts if p)

    if mode == PHONE:
        identity_key = normalize_identity(first_present(row, PHONE_KEYS), mode)
        if not name:
            return None
    else:
        identity_key = normalize_identity(name, mode)

    if identity_key is None:
        return None

    return Member(
        identity_key=identity_key,
        name=name,
        email=first_present(row, EMAIL_KEYS),
        member_id=first_present(row, MEMBER_ID_KEYS),
    )


def read_csv_rows(content: bytes) -> List[Dict[str, str]]:
    try:
        decoded_content = content.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise RosterError("Could not decode CSV file as UTF-8.") from e

    csv_reader = csv.DictReader(io.StringIO(decoded_content))
    try:
        if not csv_reader.fieldnames:
            raise RosterError("CSV file has no header row.")

        rows = []
        for row in csv_reader:
            rows.append({
                normalize_header(k): cell_text(v)
                for k, v in row.items() if k
            })
        return rows
    except csv.Error as e:
        raise RosterError("Could not parse CSV file.") from e


def read_xlsx_rows(content: bytes) -> List[Dict[str, str]]:
    try:
        workbook = load_workbook(io.BytesIO(content), read_only=True, data_only=True)
    except Exception as e:
        raise RosterError("Could not open XLSX file.") from e

    try:
        sheet = workbook.active
        rows_iter = sheet.iter_rows(values_only=True)
        header_row = next(rows_iter, None)
        if not header_row or not any(header_row):
            raise RosterError("XLSX sheet has no header row.")
        headers = [normalize_header(h) if h is not None else "" for h in header_row]

        rows = []
        for values in rows_iter:
            rows.append({
                header: cell_text(value)
                for header, value in zip(headers, values) if header
            })
        return rows
    except RosterError:
        raise
    except Exception as e:
        raise RosterError("Could not read XLSX rows.") from e
    finally:
        workbook.close()


def parse_roster(filename: str, content: bytes, mode: str) -> List[Member]:
    """
    Parse an uploaded roster file into unique Members.

    Raises RosterError when the file cannot be read. An empty list means the
    file was readable but had no usable rows.
    """
    lowered = filename.lower()
    if lowered.endswith(".csv"):
        rows = read_csv_rows(content)
    elif lowered.endswith(".xlsx"):
        rows = read_xlsx_rows(content)
    else:
        raise RosterError("Invalid file format. Please upload a .csv or .xlsx file.")

    members = []
    seen = set()
    skipped = 0
    for row in rows:
        member = row_to_member(row, mode)
        if member is None:
            skipped += 1
            continue
        # First row wins for duplicate identities
        if member.identity_key in seen:
            skipped += 1
            continue
        seen.add(member.identity_key)
        members.append(member)

    logger.info(f"Parsed roster {filename}: {len(members)} usable, {skipped} skipped")
    return members

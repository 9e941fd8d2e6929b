import csv
import io
import re
from typing import List

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from checkin.models.session import Attendee
from checkin.utils.identity import format_phone

HEADERS = ["Name", "Identity", "Check-in Time (UTC)", "Distance (m)"]
TIME_FORMAT = "%Y-%m-%d %H:%M:%S"
INVALID_TITLE_CHARS = re.compile(r"[\[\]:*?/\\]")


def attendee_row(attendee: Attendee) -> list:
    return [
        attendee.name,
        format_phone(attendee.identity_key),
        attendee.checked_in_at.strftime(TIME_FORMAT),
        "" if attendee.distance is None else attendee.distance,
    ]


def attendance_csv(attendees: List[Attendee]) -> str:
    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n")
    writer.writerow(HEADERS)
    for attendee in attendees:
        writer.writerow(attendee_row(attendee))
    return output.getvalue()


def attendance_xlsx(attendees: List[Attendee], title: str = "Attendance") -> bytes:
    wb = Workbook()
    ws = wb.active
    # Sheet titles are capped at 31 characters and reject some punctuation
    ws.title = INVALID_TITLE_CHARS.sub("", title or "")[:31] or "Attendance"

    for col_num, header in enumerate(HEADERS, 1):
        cell = ws.cell(row=1, column=col_num, value=header)
        cell.font = Font(bold=True)

    for attendee in attendees:
        ws.append(attendee_row(attendee))

    # Auto-adjust column widths
    for col_num, column in enumerate(ws.columns, 1):
        max_length = max(len(str(cell.value)) if cell.value is not None else 0 for cell in column)
        ws.column_dimensions[get_column_letter(col_num)].width = min(max_length + 2, 50)

    output = io.BytesIO()
    wb.save(output)
    return output.getvalue()

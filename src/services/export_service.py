"""CSV export of registrations for spreadsheet tools."""
import csv
import io
from datetime import date
from typing import Iterable, Optional

from src.models.registration import RegistrationRecord

CSV_MIME_TYPE = "text/csv"
CSV_HEADERS = ["姓名", "工号", "部门", "节目推荐", "节目名称", "节目类型", "参演人数", "参演人员名单", "报名时间"]


def export_csv(records: Iterable[RegistrationRecord]) -> bytes:
    """
    Serialize registrations to UTF-8 CSV with a byte-order mark.

    Fields containing a comma, quote or line break are quoted with embedded
    quotes doubled. The participant roster is blank for solo programs.

    Args:
        records: Registrations already loaded in memory

    Returns:
        bytes: CSV document, header row first
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADERS)

    for record in records:
        writer.writerow([
            record.name,
            record.employee_id,
            record.department,
            record.recommended_program,
            record.program_name,
            record.program_type,
            record.participant_count,
            record.roster,
            record.timestamp,
        ])

    return buffer.getvalue().encode("utf-8-sig")


def export_filename(day: Optional[date] = None) -> str:
    """Suggested download name, e.g. 2026年会报名数据_导出_2026-01-05.csv."""
    day = day or date.today()
    return f"2026年会报名数据_导出_{day.isoformat()}.csv"

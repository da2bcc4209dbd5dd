"""Unit tests for export_service."""
from datetime import date

from src.models.registration import RegistrationRecord
from src.services.export_service import CSV_HEADERS, CSV_MIME_TYPE, export_csv, export_filename


def _lines(data: bytes):
    return data.decode("utf-8-sig").split("\n")


class TestExportCsv:
    """Test export_csv function."""

    def test_starts_with_bom(self):
        assert export_csv([]).startswith(b"\xef\xbb\xbf")

    def test_header_only_for_no_records(self):
        assert _lines(export_csv([])) == [",".join(CSV_HEADERS), ""]

    def test_row_column_order(self):
        record = RegistrationRecord(
            employee_id="1001",
            name="张三",
            department="研发",
            recommended_program="魔术",
            program_name="合唱",
            program_type="唱歌",
            participant_count="单人",
            timestamp="2026/01/05 14:03:00",
        )

        lines = _lines(export_csv([record]))

        assert lines[1] == "张三,1001,研发,魔术,合唱,唱歌,单人,,2026/01/05 14:03:00"

    def test_quote_is_doubled_and_wrapped(self):
        record = RegistrationRecord(employee_id="1001", program_name='我的"梦想"')

        lines = _lines(export_csv([record]))

        assert '"我的""梦想"""' in lines[1]

    def test_delimiter_is_wrapped(self):
        record = RegistrationRecord(
            employee_id="1002",
            participant_count="多人",
            participant_list="李四,王五",
        )

        assert '"李四,王五"' in _lines(export_csv([record]))[1]

    def test_solo_roster_is_blank(self):
        record = RegistrationRecord(employee_id="1001", participant_count="单人", participant_list="旧名单")

        assert "旧名单" not in export_csv([record]).decode("utf-8-sig")

    def test_output_is_deterministic(self):
        records = [
            RegistrationRecord(employee_id="1001", name='引"号', program_name="a,b"),
            RegistrationRecord(employee_id="1002", name="李四"),
        ]

        assert export_csv(records) == export_csv(records)

    def test_one_row_per_record(self):
        records = [RegistrationRecord(employee_id=str(i)) for i in range(5)]

        assert len(_lines(export_csv(records))) == 1 + 5 + 1


class TestExportFilename:
    """Test export_filename function."""

    def test_includes_date(self):
        assert export_filename(date(2026, 1, 5)) == "2026年会报名数据_导出_2026-01-05.csv"

    def test_defaults_to_today(self):
        assert export_filename().endswith(f"{date.today().isoformat()}.csv")

    def test_mime_type(self):
        assert CSV_MIME_TYPE == "text/csv"

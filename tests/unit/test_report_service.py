"""Unit tests for the console report and remittance export."""

import csv
import io
from decimal import Decimal

import pytest
from rich.console import Console

from waterbill.services.cost_share_service import CostShareService
from waterbill.services.invoice_service import InvoiceService
from waterbill.services.report_service import (
    REMITTANCE_HEADER,
    REPORT_COLUMNS,
    build_report_rows,
    build_report_table,
    render_reconciliation,
    write_remittance_csv,
)


@pytest.fixture
def batch(fake_repository):
    return InvoiceService(fake_repository).build_all("2024-3")


@pytest.fixture
def summary(fake_repository):
    return CostShareService(fake_repository).summarize("2024-3")


@pytest.fixture
def half_cent_batch(make_repository):
    """Two active members; 208 m³ general gives a share of 41.225."""
    members = dict(make_repository().members)
    name, iban, _ = members[3]
    members[3] = (name, iban, False)
    repository = make_repository(members=members, general={"2024-3": 208})
    return InvoiceService(repository).build_all("2024-3")


def render(table) -> str:
    console = Console(file=io.StringIO(), width=120, color_system=None)
    console.print(table)
    return console.file.getvalue()


class TestReportRows:
    def test_rows_follow_batch_order(self, batch):
        rows = build_report_rows(batch, "es_ES")

        assert [row.member_id for row in rows] == ["1", "2", "3"]
        assert rows[1].name == "Luis Pérez"
        assert rows[1].previous == "200"
        assert rows[1].current == "228"
        assert rows[1].consumption == "28"
        assert rows[1].consumption_charge == "36,21"
        assert rows[1].cost_share == "25,89"

    def test_half_cent_rounds_up(self, half_cent_batch):
        assert half_cent_batch.share == Decimal("41.225")

        rows = build_report_rows(half_cent_batch, "es_ES")

        assert rows[0].cost_share == "41,23"
        assert rows[0].total == "89,43"


class TestReportTable:
    def test_columns_and_alignment(self, batch):
        table = build_report_table(build_report_rows(batch, "es_ES"), title="2024-3")

        assert [column.header for column in table.columns] == list(REPORT_COLUMNS)
        for column in table.columns:
            expected = "left" if column.header == "Nombre" else "right"
            assert column.justify == expected
        assert table.row_count == 3
        assert table.title == "2024-3"

    def test_rendered_rows(self, batch):
        text = render(build_report_table(build_report_rows(batch, "es_ES")))

        for column in REPORT_COLUMNS:
            assert column in text
        assert "Ana García" in text
        assert "Marta Ruiz" in text
        assert "36,21" in text

    def test_empty_table(self):
        table = build_report_table([])

        assert table.row_count == 0
        assert "Nombre" in render(table)


class TestReconciliation:
    def test_reconciliation_figures(self, summary, batch):
        text = render_reconciliation(summary, batch, "es_ES")

        assert "Periodo: 2024-3" in text
        assert "119,26" in text
        assert "41,58" in text
        assert "Derrama: 53 m³" in text
        assert "77,68" in text
        assert "/ 3 socios" in text


class TestRemittance:
    def test_writes_header_and_rounded_totals(self, batch, tmp_path):
        path = write_remittance_csv(batch, tmp_path / "out" / "remesa.csv")

        with open(path, newline="", encoding="utf-8") as f:
            rows = list(csv.reader(f))

        assert tuple(rows[0]) == REMITTANCE_HEADER
        assert [row[0] for row in rows[1:]] == ["1", "2", "3"]
        assert rows[1][2] == "ES7620770024003102575766"
        # 5.37 + 42.83 + 25.8933...
        assert rows[1][3] == "74.09"

    def test_report_and_remittance_agree_on_half_cent(self, half_cent_batch, tmp_path):
        path = write_remittance_csv(half_cent_batch, tmp_path / "remesa.csv")
        with open(path, newline="", encoding="utf-8") as f:
            remitted = [row[3] for row in list(csv.reader(f))[1:]]

        printed = [row.total for row in build_report_rows(half_cent_batch, "es_ES")]

        assert remitted[0] == "89.43"
        assert [total.replace(",", ".") for total in printed] == remitted

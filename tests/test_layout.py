"""
Unit tests for report layout.

Tests which sections appear and how values are formatted.
"""

from datetime import date

from inventory_report.core.formatting import Formatter
from inventory_report.core.layout import NOT_SPECIFIED, build_report_document
from inventory_report.core.models import DateRange, ReportPayload
from inventory_report.core.statistics import compute_statistics

JANUARY = DateRange(date(2026, 1, 1), date(2026, 1, 31))
TODAY = date(2026, 2, 1)


def _build(payload, stats=None):
    return build_report_document(
        payload=payload,
        statistics=stats,
        date_range=JANUARY,
        formatter=Formatter(),
        component_id=42,
        generated_on=TODAY,
    )


def _titles(doc):
    return [section.title for section in doc.sections]


class TestReportDocument:
    """Test document sections."""

    def test_full_report(self, report_json):
        """Verify every section is present for a complete payload."""
        payload = ReportPayload.from_json(report_json)
        doc = _build(payload, compute_statistics(payload, JANUARY))

        assert doc.title == "Envanter Kullanım Raporu"
        assert doc.subtitle == "Parça #42 - Kullanım İstatistikleri"
        assert _titles(doc) == [
            "Parça Bilgileri",
            "Kullanım İstatistikleri",
            "Kullanım Geçmişi",
            "Fiyat Geçmişi",
        ]
        assert doc.empty_message is None

    def test_company_header_and_footer(self, report_json):
        payload = ReportPayload.from_json(report_json)
        doc = _build(payload)

        assert doc.header.company_name == "Oto Servis A.Ş."
        assert doc.header.badge == "ENVANTER RAPORU"
        assert "Rapor Tarihi: 01.02.2026" in doc.header.badge_lines
        assert "Parça No: #42" in doc.header.badge_lines
        assert doc.footer_lines[0] == "Bu rapor Oto Servis A.Ş. tarafından otomatik olarak oluşturulmuştur."
        assert doc.footer_lines[1] == "Rapor Tarihi: 01.02.2026 | Tarih Aralığı: 01.01.2026 - 31.01.2026"

    def test_no_company_no_header(self, report_json):
        del report_json["component"]["company"]
        doc = _build(ReportPayload.from_json(report_json))

        assert doc.header is None
        assert doc.footer_lines == ()

    def test_part_info_fields(self, report_json):
        report_json["component"]["partNumber"] = None
        doc = _build(ReportPayload.from_json(report_json))
        fields = dict(doc.sections[0].fields)

        assert fields["Parça Adı"] == "Fren Balatası"
        assert fields["Parça Numarası"] == NOT_SPECIFIED
        assert fields["Mevcut Fiyat"] == "₺450,00"
        assert fields["Stok Miktarı"] == "12 adet"

    def test_statistics_cards(self, report_json):
        payload = ReportPayload.from_json(report_json)
        doc = _build(payload, compute_statistics(payload, JANUARY))
        stats_section = doc.sections[1]

        cards = {card.label: card.value for card in stats_section.cards}
        assert cards == {
            "Toplam Kullanım": "2",
            "Aylık Ortalama": "2,0",
            "Haftalık Ortalama": "0,5",
            "Toplam Maliyet": "₺250,00",
        }
        quantity_group = dict(stats_section.groups[0][1])
        assert quantity_group["Toplam Kullanılan Miktar"] == "5 adet"
        assert quantity_group["Aylık Ortalama Miktar"] == "5,0 adet"

    def test_usage_table_rows(self, report_json):
        payload = ReportPayload.from_json(report_json)
        table = _build(payload).sections[1].table

        assert table.headers[0] == "Servis Tarihi"
        assert table.rows[0] == ("05.01.2026", "34 ABC 123", "2 adet", "₺50,00", "₺100,00")

    def test_price_reason_defaults(self, report_json):
        payload = ReportPayload.from_json(report_json)
        table = _build(payload).sections[-1].table
        assert table.rows[1][3] == NOT_SPECIFIED

    def test_empty_histories_omit_tables(self, report_json):
        report_json["usageHistory"] = []
        report_json["priceHistory"] = []
        payload = ReportPayload.from_json(report_json)
        doc = _build(payload, compute_statistics(payload, JANUARY))

        assert _titles(doc) == ["Parça Bilgileri", "Kullanım İstatistikleri"]

    def test_no_payload(self):
        doc = _build(None)
        assert doc.empty_message == "Envanter raporu bulunamadı."
        assert doc.sections == ()

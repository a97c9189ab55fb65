# test_imports.py
import inventory_report


def test_package_imports():
    assert inventory_report.__version__


def test_public_entry_points():
    from inventory_report.cli.main import app
    from inventory_report.core.controller import ReportFetchController
    from inventory_report.export import DocumentExporter
    from inventory_report.sdk import InventoryApiClient

    assert app is not None
    assert ReportFetchController and DocumentExporter and InventoryApiClient

"""
Shared test fixtures for inventory report tests.
"""

import copy

import pytest

SAMPLE_REPORT = {
    "component": {
        "id": 42,
        "name": "Fren Balatası",
        "partNumber": "FB-1001",
        "price": 450.0,
        "stockCount": 12,
        "reorderLevel": 5,
        "company": {
            "name": "Oto Servis A.Ş.",
            "address": "Atatürk Cad. No:1 İstanbul",
            "phone": "0212 555 00 00",
            "email": "info@otoservis.example",
        },
    },
    "usageHistory": [
        {
            "serviceDate": "2026-01-05T10:30:00.000Z",
            "vehiclePlateNo": "34 ABC 123",
            "quantity": 2,
            "unitPrice": 50.0,
            "cost": 100.0,
        },
        {
            "serviceDate": "2026-01-20",
            "vehiclePlateNo": "06 XYZ 456",
            "quantity": 3,
            "unitPrice": 50.0,
            "cost": 150.0,
        },
    ],
    "priceHistory": [
        {
            "changeDate": "2026-01-10",
            "oldPrice": 400.0,
            "newPrice": 450.0,
            "reason": "Tedarikçi zammı",
        },
        {
            "changeDate": "2026-01-15",
            "oldPrice": 450.0,
            "newPrice": 450.0,
        },
    ],
}


@pytest.fixture
def report_json():
    """A usage-report document as the API returns it."""
    return copy.deepcopy(SAMPLE_REPORT)

"""
Pytest configuration and shared fixtures.
"""

import json

import pytest

from airwayfit.models.outputs import CanonicalKey
from airwayfit.models.records import Catalogs, DeviceRecord


@pytest.fixture
def sample_sads() -> list[DeviceRecord]:
    """Small SAD catalog with noisy names and one misspelled manufacturer."""
    return [
        DeviceRecord(
            name="AuraGain Supraglottic Airway Device",
            manufacturer="Ambu",
            internal_mm=10.0,
            size="Size 4, Medium adult, 50-70 kg",
        ),
        DeviceRecord(
            name="AuraGain®, Supraglottic Airway",
            manufacturer="Ambu",
            internal_mm=8.0,
            size="Size 3",
        ),
        DeviceRecord(
            name="i-gel",
            manufacturer="Intersurgcial",
            internal_mm=11.0,
            size=4,
        ),
        DeviceRecord(
            name="i-gel® Supraglottic Airway",
            manufacturer="Intersurgical",
            internal_mm="12.0",
            size="Size 5",
        ),
        DeviceRecord(
            name="i-gel",
            manufacturer="Intersurgical",
            internal_mm=9.0,
            size="n/a",
        ),
        DeviceRecord(
            name="™",
            manufacturer="Ghost Medical",
            internal_mm=9.0,
            size="Size 4",
        ),
    ]


@pytest.fixture
def scenario_etts() -> list[DeviceRecord]:
    """ETTs whose gaps against a 10.0 mm lumen are 0.4, 0.6 and -0.1 mm."""
    return [
        DeviceRecord(name="Tube A", manufacturer="Acme", internal_mm=7.0, external_mm=9.6, type="cuffed"),
        DeviceRecord(name="Tube B", manufacturer="Acme", internal_mm=6.5, external_mm=9.4, type="cuffed"),
        DeviceRecord(name="Tube C", manufacturer="Acme", internal_mm=7.5, external_mm=10.1),
    ]


@pytest.fixture
def ranking_etts() -> list[DeviceRecord]:
    """Three models of one tube line: (ID, OD) = (7.5, 10.2), (7.5, 9.8), (7.0, 9.0)."""
    return [
        DeviceRecord(name="Hi-Lo", manufacturer="Medtronic", internal_mm=7.5, external_mm=10.2),
        DeviceRecord(name="Hi-Lo", manufacturer="Medtronic", internal_mm=7.5, external_mm=9.8),
        DeviceRecord(name="Hi-Lo", manufacturer="Medtronic", internal_mm=7.0, external_mm=9.0),
    ]


@pytest.fixture
def auragain_key() -> CanonicalKey:
    return CanonicalKey(name="auragain", manufacturer="ambu")


@pytest.fixture
def scenario_catalogs(sample_sads, scenario_etts) -> Catalogs:
    return Catalogs(sads=sample_sads, etts=scenario_etts)


@pytest.fixture
def write_json(tmp_path):
    """Write a JSON payload to a file under tmp_path and return its path."""
    def _write(name, payload):
        path = tmp_path / name
        path.write_text(json.dumps(payload), encoding="utf-8")
        return path
    return _write

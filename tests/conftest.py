"""Shared fixtures for the telemetry test-suite."""

from __future__ import annotations

import pytest

from engine_telemetry.service import TelemetryService
from engine_telemetry.telemetry.assembler import StaticTelemetryData
from engine_telemetry.telemetry.models import ApplicationServer, Database, Jdk, LicenseKeyData

INSTALLATION_ID = "cb07ce31-c8e3-4f5f-94c2-1b28175c2022"
PRODUCT_NAME = "Runtime"
PRODUCT_VERSION = "7.14.0"
PRODUCT_EDITION = "special"
DB_VENDOR = "mySpecialDb"
DB_VERSION = "v.1.2.3"
APP_SERVER_VERSION = "Apache Tomcat/10.0.1"
LICENSE_CUSTOMER_NAME = "customer a"


@pytest.fixture()
def license_key() -> LicenseKeyData:
    return LicenseKeyData(
        customer=LICENSE_CUSTOMER_NAME,
        type="UNIFIED",
        valid_until="2029-09-01",
        is_unlimited=False,
        features={"engine": "true"},
        raw="raw license",
    )


@pytest.fixture()
def static_data(license_key: LicenseKeyData) -> StaticTelemetryData:
    return StaticTelemetryData(
        installation_id=INSTALLATION_ID,
        product_name=PRODUCT_NAME,
        product_version=PRODUCT_VERSION,
        product_edition=PRODUCT_EDITION,
        database=Database(vendor=DB_VENDOR, version=DB_VERSION),
        jdk=Jdk(vendor="Eclipse Adoptium", version="17.0.9"),
        application_server=ApplicationServer.from_server_info(APP_SERVER_VERSION),
        license_key=license_key,
    )


@pytest.fixture()
def service(static_data: StaticTelemetryData) -> TelemetryService:
    return TelemetryService(static_data)

"""Tests for the telemetry snapshot models."""

from __future__ import annotations

import copy
import dataclasses

import pytest

from engine_telemetry.telemetry.models import (
    ApplicationServer,
    Database,
    FrozenMapping,
    Internals,
    Jdk,
    LicenseKeyData,
    Product,
    TelemetryData,
)


@pytest.mark.parametrize(
    ("server_info", "vendor"),
    [
        ("Apache Tomcat/10.0.1", "Apache Tomcat"),
        ("WildFly Full 19.0.0.Final (WildFly Core 11.0.0.Final) - 2.0.30.Final", "WildFly"),
        ("IBM WebSphere Liberty/20.0.0.9", "IBM WebSphere Liberty"),
        ("10.0.1", ""),
    ],
)
def test_application_server_vendor_is_parsed_from_server_info(server_info: str, vendor: str) -> None:
    server = ApplicationServer.from_server_info(server_info)

    assert server.vendor == vendor
    assert server.version == server_info


def test_frozen_mapping_preserves_order_and_compares_by_items() -> None:
    mapping = FrozenMapping([("b", 1), ("a", 2)])

    assert list(mapping) == ["b", "a"]
    assert mapping == {"a": 2, "b": 1}
    assert mapping.to_dict() == {"b": 1, "a": 2}
    assert repr(mapping) == "FrozenMapping({'b': 1, 'a': 2})"


def test_license_features_are_frozen_copies() -> None:
    features = {"engine": "true"}
    license_key = LicenseKeyData("customer", "UNIFIED", "2029-09-01", False, features, "raw")

    features["optimize"] = "true"

    assert dict(license_key.features) == {"engine": "true"}
    with pytest.raises(TypeError):
        license_key.features["x"] = "y"  # type: ignore[index]


def _sample_data() -> TelemetryData:
    internals = Internals(
        database=Database("h2", "2.1"),
        jdk=Jdk("Oracle", "17"),
        application_server=None,
        commands={"StartCmd": 2},
        metrics={"rootProcessInstanceStart": 3},
        webapps={"cockpit", "admin"},
        telemetry_enabled=True,
    )
    return TelemetryData(
        installation="cb07ce31-c8e3-4f5f-94c2-1b28175c2022",
        product=Product("Runtime", "7.14.0", "community", internals),
    )


def test_telemetry_data_is_immutable_and_copyable() -> None:
    data = _sample_data()

    with pytest.raises(dataclasses.FrozenInstanceError):
        data.installation = "other"  # type: ignore[misc]
    assert isinstance(data.internals.commands, FrozenMapping)
    assert isinstance(data.internals.webapps, frozenset)
    assert copy.deepcopy(data) == data


def test_snapshots_are_hashable_by_value() -> None:
    data = _sample_data()

    assert hash(copy.deepcopy(data)) == hash(data)
    assert len({data, _sample_data()}) == 1
    assert hash(FrozenMapping({"a": 1, "b": 2})) == hash(FrozenMapping([("b", 2), ("a", 1)]))
    assert hash(FrozenMapping()) == hash(FrozenMapping({}))


def test_to_dict_renders_nested_payload() -> None:
    payload = _sample_data().to_dict()

    internals = payload["product"]["internals"]
    assert payload["installation"] == "cb07ce31-c8e3-4f5f-94c2-1b28175c2022"
    assert payload["product"]["name"] == "Runtime"
    assert internals["database"] == {"vendor": "h2", "version": "2.1"}
    assert internals["applicationServer"] is None
    assert internals["licenseKey"] is None
    assert internals["commands"] == {"StartCmd": {"count": 2}}
    assert internals["metrics"] == {"rootProcessInstanceStart": {"count": 3}}
    assert internals["webapps"] == ["admin", "cockpit"]
    assert internals["telemetryEnabled"] is True

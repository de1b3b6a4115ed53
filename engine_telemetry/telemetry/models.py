"""Telemetry models describing a point-in-time usage snapshot.

Every class in this module is an immutable value object. Instances never hold
a reference back into the live registries, so a snapshot handed to a caller
stays unchanged no matter how many increments happen afterwards.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, Iterator, Mapping, Optional, Tuple, TypeVar, Union

V = TypeVar("V")

_SERVER_VENDOR_PATTERN = re.compile(r"[\sA-Za-z]+")


class FrozenMapping(Mapping[str, V]):
    """Read-only, insertion-ordered mapping used for snapshot contents."""

    __slots__ = ("_data",)

    def __init__(self, items: Union[Mapping[str, V], Iterable[Tuple[str, V]]] = ()) -> None:
        self._data: Dict[str, V] = dict(items)

    def __getitem__(self, key: str) -> V:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._data!r})"

    def __hash__(self) -> int:
        return hash(frozenset(self._data.items()))

    def to_dict(self) -> Dict[str, V]:
        """Return a mutable copy preserving insertion order."""
        return dict(self._data)


@dataclass(frozen=True, slots=True)
class Database:
    vendor: str
    version: str

    def to_dict(self) -> Dict[str, Any]:
        return {"vendor": self.vendor, "version": self.version}


@dataclass(frozen=True, slots=True)
class ApplicationServer:
    """Application server the engine is deployed on."""

    vendor: str
    version: str

    @classmethod
    def from_server_info(cls, server_info: str) -> "ApplicationServer":
        """Build a descriptor from a container info string.

        The vendor is the leading run of letters and spaces, so
        ``"Apache Tomcat/10.0.1"`` yields vendor ``"Apache Tomcat"``. The full
        string is kept as the version.
        """
        vendor = ""
        match = _SERVER_VENDOR_PATTERN.search(server_info)
        if match is not None:
            vendor = match.group().strip()
            if "WildFly" in server_info:
                vendor = "WildFly"
        return cls(vendor=vendor, version=server_info)

    def to_dict(self) -> Dict[str, Any]:
        return {"vendor": self.vendor, "version": self.version}


@dataclass(frozen=True, slots=True)
class Jdk:
    vendor: str
    version: str

    def to_dict(self) -> Dict[str, Any]:
        return {"vendor": self.vendor, "version": self.version}


@dataclass(frozen=True, slots=True)
class LicenseKeyData:
    """License descriptor supplied by the license collaborator.

    The contents are embedded verbatim; nothing here interprets them.
    """

    customer: str
    type: str
    valid_until: str
    is_unlimited: bool
    features: Mapping[str, str] = field(default_factory=dict)
    raw: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "features", FrozenMapping(self.features))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "customer": self.customer,
            "type": self.type,
            "validUntil": self.valid_until,
            "unlimited": self.is_unlimited,
            "features": dict(self.features),
            "raw": self.raw,
        }


@dataclass(frozen=True, slots=True)
class Internals:
    """Environment descriptors and usage counters of one snapshot."""

    database: Database
    jdk: Jdk
    application_server: Optional[ApplicationServer] = None
    license_key: Optional[LicenseKeyData] = None
    commands: Mapping[str, int] = field(default_factory=FrozenMapping)
    metrics: Mapping[str, int] = field(default_factory=FrozenMapping)
    webapps: FrozenSet[str] = frozenset()
    telemetry_enabled: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.commands, FrozenMapping):
            object.__setattr__(self, "commands", FrozenMapping(self.commands))
        if not isinstance(self.metrics, FrozenMapping):
            object.__setattr__(self, "metrics", FrozenMapping(self.metrics))
        if not isinstance(self.webapps, frozenset):
            object.__setattr__(self, "webapps", frozenset(self.webapps))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "database": self.database.to_dict(),
            "applicationServer": (
                self.application_server.to_dict() if self.application_server else None
            ),
            "jdk": self.jdk.to_dict(),
            "licenseKey": self.license_key.to_dict() if self.license_key else None,
            "commands": {name: {"count": count} for name, count in self.commands.items()},
            "metrics": {name: {"count": count} for name, count in self.metrics.items()},
            "webapps": sorted(self.webapps),
            "telemetryEnabled": self.telemetry_enabled,
        }


@dataclass(frozen=True, slots=True)
class Product:
    name: str
    version: str
    edition: str
    internals: Internals

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "version": self.version,
            "edition": self.edition,
            "internals": self.internals.to_dict(),
        }


@dataclass(frozen=True, slots=True)
class TelemetryData:
    """Full usage snapshot returned by :meth:`TelemetryService.get_data`."""

    installation: str
    product: Product

    @property
    def internals(self) -> Internals:
        return self.product.internals

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serialisable rendering of the snapshot."""
        return {"installation": self.installation, "product": self.product.to_dict()}

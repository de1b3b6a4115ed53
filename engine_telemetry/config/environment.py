"""Environment configuration utilities for engine telemetry."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Mapping, MutableMapping, Optional
import os
import uuid


class TelemetryConfigurationError(RuntimeError):
    """Raised when required static telemetry identity is missing or invalid."""


class MissingEnvironmentVariableError(TelemetryConfigurationError):
    """Raised when a required environment variable is missing."""


class InvalidEnvironmentValueError(TelemetryConfigurationError):
    """Raised when an environment variable cannot be parsed into the expected type."""


ENV_PREFIX = "ENGINE_TELEMETRY_"


def _str_to_bool(value: str) -> bool:
    normalized = value.strip().lower()
    if normalized in {"true", "1", "yes", "y", "on"}:
        return True
    if normalized in {"false", "0", "no", "n", "off"}:
        return False
    raise InvalidEnvironmentValueError(f"Cannot interpret '{value}' as boolean")


def load_dotenv_file(path: str | Path, *, override: bool = False, env: Optional[MutableMapping[str, str]] = None) -> None:
    """Load key/value pairs from a dotenv file into the provided environment mapping.

    Parameters
    ----------
    path:
        The path to the dotenv file.
    override:
        If ``True``, values from the dotenv file replace existing environment
        variables. Otherwise existing values are preserved.
    env:
        Mutable mapping that will receive the variables. Defaults to
        :data:`os.environ`.
    """

    environment: MutableMapping[str, str] = env if env is not None else os.environ
    dotenv_path = Path(path)
    if not dotenv_path.exists():
        raise FileNotFoundError(f"Dotenv file '{dotenv_path}' does not exist")

    for raw_line in dotenv_path.read_text().splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[len("export "):].lstrip()
        if "=" not in line:
            raise InvalidEnvironmentValueError(
                f"Invalid line in dotenv file '{dotenv_path}': '{raw_line}'"
            )
        key, raw_value = line.split("=", 1)
        key = key.strip()
        value = raw_value.strip().strip('"').strip("'")
        if key in environment and not override:
            continue
        environment[key] = value


@dataclass(frozen=True, slots=True)
class EnvironmentConfig:
    """Structured view of the ``ENGINE_TELEMETRY_*`` environment variables.

    The installation identifier and product name are mandatory because a
    telemetry snapshot cannot be assembled without them. Every other
    descriptor falls back to an empty value so that partially provisioned
    environments still start.
    """

    installation_id: str
    product_name: str
    product_version: str
    product_edition: str

    database_vendor: str
    database_version: str
    application_server: Optional[str]
    jdk_vendor: str
    jdk_version: str

    telemetry_enabled: bool
    webapps: tuple[str, ...]

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "EnvironmentConfig":
        mapping = env if env is not None else os.environ

        def key(name: str) -> str:
            return f"{ENV_PREFIX}{name}"

        def require(name: str) -> str:
            value = mapping.get(key(name))
            if value is None or value.strip() == "":
                raise MissingEnvironmentVariableError(
                    f"Environment variable '{key(name)}' is required but missing"
                )
            return value.strip()

        def optional(name: str) -> Optional[str]:
            value = mapping.get(key(name))
            if value is None or value.strip() == "":
                return None
            return value.strip()

        def optional_bool(name: str, default: bool) -> bool:
            value = mapping.get(key(name))
            if value is None or value == "":
                return default
            return _str_to_bool(value)

        def optional_csv(name: str) -> tuple[str, ...]:
            value = optional(name)
            if not value:
                return tuple()
            items: Iterable[str] = (item.strip() for item in value.split(","))
            return tuple(dict.fromkeys(item for item in items if item))

        installation_id = require("INSTALLATION_ID")
        try:
            uuid.UUID(installation_id)
        except ValueError as exc:
            raise InvalidEnvironmentValueError(
                f"'{key('INSTALLATION_ID')}' must be a UUID, got '{installation_id}'"
            ) from exc

        return cls(
            installation_id=installation_id,
            product_name=require("PRODUCT_NAME"),
            product_version=optional("PRODUCT_VERSION") or "",
            product_edition=optional("PRODUCT_EDITION") or "community",
            database_vendor=optional("DB_VENDOR") or "",
            database_version=optional("DB_VERSION") or "",
            application_server=optional("APP_SERVER"),
            jdk_vendor=optional("JDK_VENDOR") or "",
            jdk_version=optional("JDK_VERSION") or "",
            telemetry_enabled=optional_bool("ENABLED", False),
            webapps=optional_csv("WEBAPPS"),
        )

# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Storage endpoint configuration.

Configuration is optional: with no file the signer targets AWS S3 in
``us-east-1``.  To point it elsewhere, write a YAML file at the XDG
location

    ``$XDG_CONFIG_HOME/s3presign/s3presign.yaml``
    (typically ``~/.config/s3presign/s3presign.yaml``)

for example::

    storage:
      endpoint: s3.us-west-004.backblazeb2.com
      region: us-west-004        # optional, derived from endpoint
      scheme: https
    presign:
      default_expiry: 3600

``!env`` tags resolve values from environment variables (a ``.env``
file is loaded first if present).  Credentials are never read from this
file; callers pass them to the signer directly.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, TypeVar, overload

import yaml
from platformdirs import user_config_path

from s3presign.dotenv_loader import load_dotenv_once
from s3presign.url import MAX_EXPIRY_SECONDS


logger = logging.getLogger(__name__)

_T = TypeVar("_T")

#: Application name for XDG path resolution.
_APP_NAME = "s3presign"

DEFAULT_REGION = "us-east-1"
DEFAULT_SCHEME = "https"
DEFAULT_EXPIRY_SECONDS = 3600

_AWS_SUFFIX = ".amazonaws.com"


def get_config_path() -> Path:
    """Return the default config file path.

    Uses XDG: ``$XDG_CONFIG_HOME/s3presign/s3presign.yaml``.
    """
    return user_config_path(_APP_NAME) / "s3presign.yaml"


def get_dotenv_path() -> Path:
    """Return the default ``.env`` path inside the XDG config directory."""
    return user_config_path(_APP_NAME) / ".env"


class ConfigError(Exception):
    """Base exception for configuration errors."""


# ---------------------------------------------------------------------------
# Endpoint helpers
# ---------------------------------------------------------------------------


def _bare_host(endpoint: str) -> str:
    """Strip scheme, path and port from an endpoint."""
    host = endpoint.split("://", 1)[-1]
    host = host.split("/", 1)[0]
    return host.split(":", 1)[0].lower()


def region_from_endpoint(endpoint: str) -> str | None:
    """Infer the signing region from an endpoint host name.

    - AWS: the label before ``amazonaws.com``
      (``s3.eu-west-1.amazonaws.com`` -> ``eu-west-1``), or the legacy
      dash form (``s3-eu-west-1.amazonaws.com`` -> ``eu-west-1``).  The
      global ``s3.amazonaws.com`` and ``s3-external-1`` endpoints map to
      ``us-east-1``.  Transfer Acceleration hosts carry no region.
    - Other providers: the second DNS label
      (``s3.us-west-004.backblazeb2.com`` -> ``us-west-004``).

    Returns:
        The region, or None if the host does not name one.
    """
    host = _bare_host(endpoint)
    labels = host.split(".")
    if host.endswith(_AWS_SUFFIX):
        if "s3-accelerate" in labels:
            return None
        candidate = labels[-3] if len(labels) >= 3 else ""
        if candidate in ("", "s3", "s3-external-1"):
            return DEFAULT_REGION
        if candidate.startswith("s3-"):
            return candidate.removeprefix("s3-")
        return candidate
    if len(labels) < 3:
        return None
    return labels[1] or None


def split_scheme(endpoint: str) -> tuple[str | None, str]:
    """Split ``https://host`` into ``("https", "host")``."""
    if "://" in endpoint:
        scheme, rest = endpoint.split("://", 1)
        return scheme.lower(), rest.rstrip("/")
    return None, endpoint.rstrip("/")


# ---------------------------------------------------------------------------
# YAML tag placeholders and value resolution
# ---------------------------------------------------------------------------


class _EnvVar:
    """Placeholder for an unresolved ``!env VAR_NAME`` tag."""

    def __init__(self, var_name: str) -> None:
        self.var_name = var_name


def _env_constructor(loader: yaml.SafeLoader, node: yaml.Node) -> _EnvVar:
    """Handle ``!env VAR_NAME`` in YAML."""
    value = loader.construct_scalar(node)  # type: ignore[arg-type]
    return _EnvVar(str(value))


def _make_loader() -> type[yaml.SafeLoader]:
    """Create a YAML loader that understands ``!env``."""

    class EnvLoader(yaml.SafeLoader):
        pass

    EnvLoader.add_constructor("!env", _env_constructor)
    return EnvLoader


def _raw_resolve(value: object) -> str | None:
    """Resolve an ``_EnvVar`` to its string value, or stringify literals.

    Unset environment variables and empty strings resolve to None.
    """
    if isinstance(value, _EnvVar):
        return os.environ.get(value.var_name) or None
    if value is None:
        return None
    return str(value) or None


_MISSING = object()


@overload
def _resolve(value: object, coerce: type[_T], *, default: _T) -> _T: ...


@overload
def _resolve(value: object, coerce: type[_T]) -> _T | None: ...


def _resolve(
    value: object,
    coerce: type[Any],
    *,
    default: object = _MISSING,
) -> Any:
    """Resolve a YAML value, handling ``!env`` tags and type coercion.

    Args:
        value: Raw value from YAML (may be ``_EnvVar``, None, or a
            literal already parsed by PyYAML).
        coerce: Target type (``str`` or ``int``).
        default: Default when value is absent.

    Returns:
        The resolved, coerced value, or None when absent without default.

    Raises:
        ConfigError: If the value cannot be coerced.
    """
    if isinstance(value, bool):
        raise ConfigError(f"Expected {coerce.__name__}, got bool {value!r}")
    if not isinstance(value, _EnvVar) and isinstance(value, coerce):
        return value

    resolved = _raw_resolve(value)
    if resolved is None:
        if default is not _MISSING:
            return default
        return None

    try:
        return coerce(resolved)
    except ValueError as e:
        raise ConfigError(
            f"Cannot convert {resolved!r} to {coerce.__name__}"
        ) from e


def _section(raw: dict, name: str) -> dict:
    section = raw.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigError(f"'{name}' must be a YAML mapping")
    return section


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PresignConfig:
    """Where and how URLs are signed.

    Attributes:
        endpoint: Storage endpoint host (no bucket), e.g.
            ``s3.us-west-004.backblazeb2.com``.  Defaults to the AWS
            regional endpoint for ``region``.
        region: Signing region.  Derived from ``endpoint`` when unset.
        scheme: URL scheme of emitted URLs.
        default_expiry: Expiry used by callers that do not pick one.
    """

    endpoint: str | None = None
    region: str | None = None
    scheme: str = DEFAULT_SCHEME
    default_expiry: int = DEFAULT_EXPIRY_SECONDS

    def __post_init__(self) -> None:
        """Validate configuration.

        Raises:
            ConfigError: If configuration is invalid.
        """
        if self.scheme not in ("https", "http"):
            raise ConfigError(f"Unsupported scheme: {self.scheme!r}")
        if self.endpoint is not None and "://" in self.endpoint:
            raise ConfigError(
                f"Endpoint must be a host name without scheme: "
                f"{self.endpoint!r}"
            )
        if not 0 < self.default_expiry <= MAX_EXPIRY_SECONDS:
            raise ConfigError(
                f"Default expiry must be in 1..{MAX_EXPIRY_SECONDS}: "
                f"{self.default_expiry}"
            )

    @property
    def resolved_region(self) -> str:
        """Signing region, explicit or inferred from the endpoint."""
        if self.region:
            return self.region
        if self.endpoint:
            region = region_from_endpoint(self.endpoint)
            if region is not None:
                return region
            logger.debug(
                "Cannot infer region from %s, using %s",
                self.endpoint,
                DEFAULT_REGION,
            )
        return DEFAULT_REGION

    @property
    def resolved_endpoint(self) -> str:
        """Endpoint host, defaulting to the AWS regional endpoint."""
        if self.endpoint:
            return self.endpoint
        return f"s3.{self.resolved_region}{_AWS_SUFFIX}"

    @classmethod
    def from_yaml(cls, config_path: Path | None = None) -> "PresignConfig":
        """Load configuration from a YAML file.

        Values tagged with ``!env VAR_NAME`` are resolved from the
        environment at load time.  A ``.env`` file is loaded first if
        present.

        Args:
            config_path: Path to YAML config file.  Defaults to
                ``~/.config/s3presign/s3presign.yaml`` (XDG); a missing
                default file yields the default configuration.

        Returns:
            PresignConfig instance.

        Raises:
            ConfigError: If an explicitly given file is missing or the
                file content is invalid.
        """
        load_dotenv_once()

        if config_path is None:
            config_path = get_config_path()
            if not config_path.exists():
                logger.debug("No config at %s, using defaults", config_path)
                return cls()

        if not config_path.exists():
            raise ConfigError(f"Config file not found: {config_path}")

        with open(config_path) as f:
            raw = yaml.load(f, Loader=_make_loader())

        if raw is None:
            return cls()
        if not isinstance(raw, dict):
            raise ConfigError(
                f"Config file must be a YAML mapping: {config_path}"
            )

        config = cls._from_raw(raw)
        logger.info(
            "Presign config loaded: endpoint=%s region=%s",
            config.resolved_endpoint,
            config.resolved_region,
        )
        return config

    @classmethod
    def _from_raw(cls, raw: dict) -> "PresignConfig":
        """Build config from parsed (but unresolved) YAML dict."""
        storage = _section(raw, "storage")
        presign = _section(raw, "presign")

        endpoint = _resolve(storage.get("endpoint"), str)
        scheme = _resolve(storage.get("scheme"), str)
        if endpoint is not None:
            endpoint_scheme, endpoint = split_scheme(endpoint)
            if scheme is None:
                scheme = endpoint_scheme

        return cls(
            endpoint=endpoint,
            region=_resolve(storage.get("region"), str),
            scheme=(scheme or DEFAULT_SCHEME).lower(),
            default_expiry=_resolve(
                presign.get("default_expiry"),
                int,
                default=DEFAULT_EXPIRY_SECONDS,
            ),
        )

# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""AWS SigV4 primitives for query-string (presigned) S3 requests.

Provides the three signing stages used by the URL builder:

- Canonicalization (URI encoding, canonical URI/query/headers/request)
- Signing key derivation (HMAC-SHA256 chain over the credential scope)
- Signature computation over the string to sign

Presigned S3 requests sign only the ``host`` header and use the
``UNSIGNED-PAYLOAD`` placeholder instead of a body hash.

No boto3/botocore dependency, only stdlib ``hmac`` and ``hashlib``.
"""

from __future__ import annotations

import hashlib
import hmac
from collections.abc import Mapping
from dataclasses import dataclass

from s3presign.errors import EncodingFailure


ALGORITHM = "AWS4-HMAC-SHA256"
UNSIGNED_PAYLOAD = "UNSIGNED-PAYLOAD"
SIGNED_HEADERS = "host"
SCOPE_TERMINATOR = "aws4_request"
SERVICE_S3 = "s3"

_AWS_UNRESERVED = frozenset(
    b"ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_.~"
)


# ---------------------------------------------------------------------------
# Credential scope
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CredentialScope:
    """Day/region/service binding of a signature.

    Attributes:
        date: Date stamp (YYYYMMDD).
        region: Signing region, e.g. ``us-east-1`` or ``us-west-004``.
        service: Service name, ``s3`` for object storage.
    """

    date: str
    region: str
    service: str = SERVICE_S3

    def __str__(self) -> str:
        return f"{self.date}/{self.region}/{self.service}/{SCOPE_TERMINATOR}"


# ---------------------------------------------------------------------------
# URI encoding (AWS-specific RFC 3986 subset)
# ---------------------------------------------------------------------------


def uri_encode(value: str, *, encode_slash: bool = True) -> str:
    """URI-encode a value using AWS's specific rules.

    - Unreserved characters are not encoded: A-Z, a-z, 0-9, -, _, ., ~
    - Every other UTF-8 byte is percent-encoded as %XX (uppercase hex)
    - Forward slashes (/) are optionally preserved

    Args:
        value: String to encode.
        encode_slash: If True, encode '/'; if False, preserve '/'.

    Returns:
        URI-encoded string.

    Raises:
        EncodingFailure: If the value cannot be encoded as UTF-8.
    """
    try:
        raw = value.encode("utf-8")
    except UnicodeEncodeError as e:
        raise EncodingFailure(
            f"Cannot percent-encode {value!r}: not valid UTF-8"
        ) from e

    result: list[str] = []
    for byte in raw:
        if byte in _AWS_UNRESERVED:
            result.append(chr(byte))
        elif byte == 0x2F and not encode_slash:
            result.append("/")
        else:
            result.append(f"%{byte:02X}")
    return "".join(result)


# ---------------------------------------------------------------------------
# Canonical request construction
# ---------------------------------------------------------------------------


def canonical_uri(key: str) -> str:
    """Build the canonical URI for an object key.

    S3 single-encodes the path and keeps ``/`` as a segment separator.
    The key is taken as raw text, so ``%`` in a key is encoded as ``%25``.
    """
    return "/" + uri_encode(key, encode_slash=False)


def canonical_query_string(params: Mapping[str, str]) -> str:
    """Build the canonical query string.

    Names and values are URI-encoded, then sorted by encoded name and
    value using byte-ordinal comparison. Empty values are kept as
    ``name=``.
    """
    encoded = [(uri_encode(k), uri_encode(v)) for k, v in params.items()]
    encoded.sort()
    return "&".join(f"{k}={v}" for k, v in encoded)


def canonical_headers_string(host: str) -> str:
    """Build the canonical headers block; ``host`` is the only signed header."""
    return f"host:{host.strip().lower()}\n"


def build_canonical_request(
    method: str,
    key: str,
    params: Mapping[str, str],
    host: str,
) -> str:
    """Build the canonical request string for a presigned request.

    Format::

        METHOD
        /canonical-uri
        canonical-query-string
        host:<host>
        <empty line>
        host
        UNSIGNED-PAYLOAD

    Args:
        method: HTTP method.
        key: Object key (unencoded).
        params: Every query parameter that will be signed
            (``X-Amz-Signature`` excluded).
        host: Host header value.

    Returns:
        Canonical request string.
    """
    return "\n".join(
        [
            method,
            canonical_uri(key),
            canonical_query_string(params),
            canonical_headers_string(host),
            SIGNED_HEADERS,
            UNSIGNED_PAYLOAD,
        ]
    )


# ---------------------------------------------------------------------------
# Signing
# ---------------------------------------------------------------------------


def _hmac_sha256(key: bytes, msg: str) -> bytes:
    return hmac.new(key, msg.encode("utf-8"), hashlib.sha256).digest()


def derive_signing_key(secret_key: str, scope: CredentialScope) -> bytes:
    """Derive the SigV4 signing key.

    kSecret -> kDate -> kRegion -> kService -> kSigning

    Args:
        secret_key: Secret access key (application key for B2).
        scope: Credential scope the key is valid for.

    Returns:
        Derived signing key bytes.
    """
    k_date = _hmac_sha256(("AWS4" + secret_key).encode("utf-8"), scope.date)
    k_region = _hmac_sha256(k_date, scope.region)
    k_service = _hmac_sha256(k_region, scope.service)
    return _hmac_sha256(k_service, SCOPE_TERMINATOR)


def build_string_to_sign(
    timestamp: str, scope: CredentialScope, canonical_request: str
) -> str:
    """Build the SigV4 string to sign.

    Args:
        timestamp: ISO 8601 basic timestamp (``X-Amz-Date``).
        scope: Credential scope.
        canonical_request: The canonical request string.

    Returns:
        String to sign.
    """
    return "\n".join(
        [
            ALGORITHM,
            timestamp,
            str(scope),
            hashlib.sha256(canonical_request.encode("utf-8")).hexdigest(),
        ]
    )


def sign(signing_key: bytes, string_to_sign: str) -> str:
    """Compute the hex-encoded SigV4 signature."""
    return hmac.new(
        signing_key, string_to_sign.encode("utf-8"), hashlib.sha256
    ).hexdigest()

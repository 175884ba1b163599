# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Presigned URL assembly.

A ``SigningRequest`` carries everything needed to sign one URL.  It is
validated on construction, so ``build_presigned_url`` never sees a
request it cannot sign.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from s3presign import clock, sigv4
from s3presign.errors import InvalidInput


#: Longest validity window SigV4 accepts for presigned URLs (7 days).
MAX_EXPIRY_SECONDS = 604800

SUPPORTED_METHODS = frozenset({"GET", "PUT"})

#: Query parameters owned by the signer; callers may not override them.
RESERVED_PARAMS = frozenset(
    {
        "X-Amz-Algorithm",
        "X-Amz-Credential",
        "X-Amz-Date",
        "X-Amz-Expires",
        "X-Amz-Security-Token",
        "X-Amz-Signature",
        "X-Amz-SignedHeaders",
    }
)


def endpoint_host(bucket: str, endpoint: str) -> str:
    """Return the virtual-hosted-style host for a bucket."""
    return f"{bucket}.{endpoint.rstrip('/')}".lower()


def validate_expiry(expires: object) -> int:
    """Check an expiry value and return it.

    Raises:
        InvalidInput: If not an int in ``1..MAX_EXPIRY_SECONDS``.
    """
    if isinstance(expires, bool) or not isinstance(expires, int):
        raise InvalidInput(
            f"Expiry must be an integer number of seconds: {expires!r}"
        )
    if expires <= 0:
        raise InvalidInput(f"Expiry must be > 0 seconds: {expires}")
    if expires > MAX_EXPIRY_SECONDS:
        raise InvalidInput(
            f"Expiry must be <= {MAX_EXPIRY_SECONDS} seconds: {expires}"
        )
    return expires


@dataclass(frozen=True)
class SigningRequest:
    """One presigned request to sign.

    Attributes:
        method: HTTP method (GET or PUT).
        bucket: Bucket name.
        key: Object key, unencoded.
        endpoint: Storage endpoint host, e.g.
            ``s3.us-west-004.backblazeb2.com``.
        region: Signing region.
        timestamp: Signing instant (UTC).
        expires: Validity window in seconds.
        access_key_id: Access key ID (B2 key ID).
        secret_key: Secret access key (B2 application key).
        session_token: Temporary-credential token, signed as
            ``X-Amz-Security-Token`` when set.
        extra_params: Additional signed query parameters, in order.
        scheme: URL scheme.
        service: Signing service name.
    """

    method: str
    bucket: str
    key: str
    endpoint: str
    region: str
    timestamp: datetime
    expires: int
    access_key_id: str
    secret_key: str
    session_token: str | None = None
    extra_params: tuple[tuple[str, str], ...] = ()
    scheme: str = "https"
    service: str = sigv4.SERVICE_S3

    def __post_init__(self) -> None:
        """Validate the request.

        Raises:
            InvalidInput: If any field is missing or out of range.
        """
        if self.method not in SUPPORTED_METHODS:
            raise InvalidInput(f"Unsupported method: {self.method!r}")
        for name in (
            "bucket",
            "key",
            "endpoint",
            "region",
            "access_key_id",
            "secret_key",
        ):
            if not getattr(self, name):
                raise InvalidInput(f"{name} must not be empty")
        if not isinstance(self.timestamp, datetime):
            raise InvalidInput(
                f"timestamp must be a datetime: {self.timestamp!r}"
            )
        validate_expiry(self.expires)
        for name, _ in self.extra_params:
            if name in RESERVED_PARAMS:
                raise InvalidInput(f"Query parameter {name} is reserved")

    @property
    def host(self) -> str:
        return endpoint_host(self.bucket, self.endpoint)

    @property
    def amz_date(self) -> str:
        return clock.amz_date(self.timestamp)

    @property
    def scope(self) -> sigv4.CredentialScope:
        return sigv4.CredentialScope(
            date=clock.date_stamp(self.timestamp),
            region=self.region,
            service=self.service,
        )


def presigned_query_params(request: SigningRequest) -> dict[str, str]:
    """Return every query parameter covered by the signature.

    ``X-Amz-Signature`` is not included; it is appended after signing.
    """
    params = {
        "X-Amz-Algorithm": sigv4.ALGORITHM,
        "X-Amz-Credential": f"{request.access_key_id}/{request.scope}",
        "X-Amz-Date": request.amz_date,
        "X-Amz-Expires": str(request.expires),
        "X-Amz-SignedHeaders": sigv4.SIGNED_HEADERS,
    }
    if request.session_token:
        params["X-Amz-Security-Token"] = request.session_token
    params.update(request.extra_params)
    return params


def build_presigned_url(
    request: SigningRequest, *, signing_key: bytes | None = None
) -> str:
    """Sign a request and return the complete URL.

    The query string in the URL is the canonical query string itself, so
    the store reconstructs exactly what was signed.

    Args:
        request: Validated signing request.
        signing_key: Precomputed key for ``request.scope``.  Derived from
            ``request.secret_key`` when omitted.

    Returns:
        ``<scheme>://<host>/<key>?<query>&X-Amz-Signature=<hex>``.
    """
    params = presigned_query_params(request)
    host = request.host
    canonical_request = sigv4.build_canonical_request(
        request.method, request.key, params, host
    )
    string_to_sign = sigv4.build_string_to_sign(
        request.amz_date, request.scope, canonical_request
    )
    if signing_key is None:
        signing_key = sigv4.derive_signing_key(
            request.secret_key, request.scope
        )
    signature = sigv4.sign(signing_key, string_to_sign)

    return (
        f"{request.scheme}://{host}{sigv4.canonical_uri(request.key)}"
        f"?{sigv4.canonical_query_string(params)}"
        f"&X-Amz-Signature={signature}"
    )

# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Presigned GET, PUT and multipart-part PUT URLs.

``SigningClient`` binds credentials and an endpoint once and signs any
number of URLs.  The module-level ``presigned_*`` functions are one-shot
wrappers for callers that hold nothing but the raw inputs.

Every call reads the clock once.  All parts of one multipart call share
that timestamp, so their URLs differ only in ``partNumber`` and
signature.
"""

import logging
from datetime import datetime

from s3presign import sigv4
from s3presign.clock import Clock, utc_now
from s3presign.config import PresignConfig
from s3presign.errors import InvalidInput
from s3presign.url import (
    SigningRequest,
    build_presigned_url,
    validate_expiry,
)


logger = logging.getLogger(__name__)

#: S3 accepts part numbers 1..10000.
MAX_PARTS = 10000


def _validate_parts(parts: object) -> int:
    if isinstance(parts, bool) or not isinstance(parts, int):
        raise InvalidInput(f"Part count must be an integer: {parts!r}")
    if parts < 1:
        raise InvalidInput(f"Part count must be >= 1: {parts}")
    if parts > MAX_PARTS:
        raise InvalidInput(f"Part count must be <= {MAX_PARTS}: {parts}")
    return parts


class SigningClient:
    """Presigns S3 requests for one set of credentials and one endpoint.

    Args:
        access_key_id: Access key ID (Backblaze key ID, AWS access key).
        secret_key: Secret access key (Backblaze application key).
        config: Endpoint, region and default expiry.  Defaults to AWS
            ``us-east-1``.
        session_token: Temporary-credential token, signed into each URL
            as ``X-Amz-Security-Token``.
        clock: Time source, replaceable in tests.

    Raises:
        InvalidInput: If either credential is empty.
    """

    def __init__(
        self,
        access_key_id: str,
        secret_key: str,
        *,
        config: PresignConfig | None = None,
        session_token: str | None = None,
        clock: Clock = utc_now,
    ) -> None:
        if not access_key_id:
            raise InvalidInput("access_key_id must not be empty")
        if not secret_key:
            raise InvalidInput("secret_key must not be empty")

        self._access_key_id = access_key_id
        self._secret_key = secret_key
        self._session_token = session_token or None
        self._config = config or PresignConfig()
        self._clock = clock

    @property
    def endpoint(self) -> str:
        return self._config.resolved_endpoint

    @property
    def region(self) -> str:
        return self._config.resolved_region

    def _expiry(self, expiry: int | None) -> int:
        if expiry is None:
            return self._config.default_expiry
        return validate_expiry(expiry)

    def _request(
        self,
        method: str,
        bucket: str,
        key: str,
        expiry: int,
        timestamp: datetime,
        extra_params: tuple[tuple[str, str], ...] = (),
    ) -> SigningRequest:
        return SigningRequest(
            method=method,
            bucket=bucket,
            key=key,
            endpoint=self.endpoint,
            region=self.region,
            timestamp=timestamp,
            expires=expiry,
            access_key_id=self._access_key_id,
            secret_key=self._secret_key,
            session_token=self._session_token,
            extra_params=extra_params,
            scheme=self._config.scheme,
        )

    def _presigned_url(
        self, method: str, bucket: str, key: str, expiry: int | None
    ) -> str:
        expiry = self._expiry(expiry)
        request = self._request(method, bucket, key, expiry, self._clock())
        url = build_presigned_url(request)
        logger.debug(
            "Presigned %s %s/%s (expires in %ds)", method, bucket, key, expiry
        )
        return url

    def presigned_get_url(
        self, bucket: str, key: str, expiry: int | None = None
    ) -> str:
        """Return a URL that lets the bearer GET ``bucket/key``.

        ``expiry`` defaults to the config's ``default_expiry``.
        """
        return self._presigned_url("GET", bucket, key, expiry)

    def presigned_put_url(
        self, bucket: str, key: str, expiry: int | None = None
    ) -> str:
        """Return a URL that lets the bearer PUT ``bucket/key``.

        ``expiry`` defaults to the config's ``default_expiry``.
        """
        return self._presigned_url("PUT", bucket, key, expiry)

    def presigned_multipart_put_url(
        self,
        bucket: str,
        key: str,
        expiry: int | None,
        parts: int,
        upload_id: str,
    ) -> list[str]:
        """Return one part-upload URL per part, ordered by part number.

        Args:
            bucket: Bucket name.
            key: Object key of the multipart upload.
            expiry: Validity window in seconds, shared by all parts.
                None uses the config's ``default_expiry``.
            parts: Number of parts (1..10000).
            upload_id: Upload ID returned by CreateMultipartUpload.

        Returns:
            ``parts`` URLs; URL ``i`` carries ``partNumber=i + 1``.

        Raises:
            InvalidInput: If any input is invalid.  Nothing is signed
                in that case.
        """
        _validate_parts(parts)
        if not upload_id:
            raise InvalidInput("upload_id must not be empty")
        expiry = self._expiry(expiry)

        timestamp = self._clock()
        requests = [
            self._request(
                "PUT",
                bucket,
                key,
                expiry,
                timestamp,
                extra_params=(
                    ("partNumber", str(part)),
                    ("uploadId", upload_id),
                ),
            )
            for part in range(1, parts + 1)
        ]

        # Every part shares one credential scope
        signing_key = sigv4.derive_signing_key(
            self._secret_key, requests[0].scope
        )
        urls = [
            build_presigned_url(request, signing_key=signing_key)
            for request in requests
        ]
        logger.debug(
            "Presigned %d part URLs for %s/%s (expires in %ds)",
            parts,
            bucket,
            key,
            expiry,
        )
        return urls


def presigned_get_url(
    key: str,
    bucket: str,
    expiry: int,
    account_id: str,
    auth_token: str,
    *,
    config: PresignConfig | None = None,
    session_token: str | None = None,
    clock: Clock = utc_now,
) -> str:
    """Return a presigned GET URL for ``bucket/key``.

    Raises:
        InvalidInput: If any input is missing or out of range.
    """
    validate_expiry(expiry)
    client = SigningClient(
        account_id,
        auth_token,
        config=config,
        session_token=session_token,
        clock=clock,
    )
    return client.presigned_get_url(bucket, key, expiry)


def presigned_put_url(
    key: str,
    bucket: str,
    expiry: int,
    account_id: str,
    auth_token: str,
    session_id: str | None = None,
    *,
    config: PresignConfig | None = None,
    session_token: str | None = None,
    clock: Clock = utc_now,
) -> str:
    """Return a presigned PUT URL for ``bucket/key``.

    ``session_id`` only correlates this call in logs; it is not signed.

    Raises:
        InvalidInput: If any input is missing or out of range.
    """
    logger.debug("PUT URL requested for session %s", session_id)
    validate_expiry(expiry)
    client = SigningClient(
        account_id,
        auth_token,
        config=config,
        session_token=session_token,
        clock=clock,
    )
    return client.presigned_put_url(bucket, key, expiry)


def presigned_multipart_put_url(
    key: str,
    bucket: str,
    expiry: int,
    parts: int,
    upload_id: str,
    account_id: str,
    auth_token: str,
    session_id: str | None = None,
    *,
    config: PresignConfig | None = None,
    session_token: str | None = None,
    clock: Clock = utc_now,
) -> list[str]:
    """Return presigned UploadPart URLs for parts ``1..parts``.

    ``session_id`` only correlates this call in logs; it is not signed.

    Raises:
        InvalidInput: If any input is invalid; no URLs are produced.
    """
    logger.debug(
        "Multipart URLs requested for session %s (%s parts)", session_id, parts
    )
    validate_expiry(expiry)
    client = SigningClient(
        account_id,
        auth_token,
        config=config,
        session_token=session_token,
        clock=clock,
    )
    return client.presigned_multipart_put_url(
        bucket, key, expiry, parts, upload_id
    )

# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""SigV4 presigned URLs for S3-compatible object storage.

Generates time-limited GET, PUT and multipart-part PUT URLs for AWS S3,
Backblaze B2 and other S3-compatible stores:
- One-shot functions (presigned_get_url, presigned_put_url,
  presigned_multipart_put_url)
- Reusable SigningClient bound to credentials and an endpoint
- Endpoint configuration loading (PresignConfig)
"""

from s3presign.config import ConfigError, PresignConfig, region_from_endpoint
from s3presign.errors import EncodingFailure, InvalidInput, PresignError
from s3presign.presign import (
    SigningClient,
    presigned_get_url,
    presigned_multipart_put_url,
    presigned_put_url,
)
from s3presign.url import SigningRequest, build_presigned_url


__all__ = [
    # config
    "ConfigError",
    "PresignConfig",
    "region_from_endpoint",
    # errors
    "EncodingFailure",
    "InvalidInput",
    "PresignError",
    # presign
    "SigningClient",
    "presigned_get_url",
    "presigned_multipart_put_url",
    "presigned_put_url",
    # url
    "SigningRequest",
    "build_presigned_url",
]

# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Exceptions raised while presigning."""


class PresignError(Exception):
    """Base exception for presigned URL generation errors."""


class InvalidInput(PresignError):
    """A required input is missing, empty or out of range.

    Raised before any signing work happens, so a failed call never
    produces a partial result.
    """


class EncodingFailure(PresignError):
    """A value could not be percent-encoded (not representable as UTF-8)."""

# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Shared pytest fixtures."""

from collections.abc import Iterator
from datetime import UTC, datetime

import pytest

from s3presign.clock import Clock
from s3presign.logging import SecretFilter


FROZEN_TIME = datetime(2015, 8, 30, 12, 36, 0, tzinfo=UTC)


@pytest.fixture
def frozen_clock() -> Clock:
    """Clock pinned to 2015-08-30T12:36:00Z."""
    return lambda: FROZEN_TIME


@pytest.fixture(autouse=True)
def _clear_registered_secrets() -> Iterator[None]:
    """Registered secrets are process-wide; reset around tests."""
    SecretFilter.clear_secrets()
    yield
    SecretFilter.clear_secrets()

# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the error taxonomy."""

import pytest

from src.core.errors import (
    ForbiddenError,
    GuardError,
    InvalidStateError,
    NotFoundError,
    RejectedError,
    StoreUnavailableError,
    error_for,
)
from src.models.common import DecisionCode


class TestGuardError:
    """Tests for the base exception."""

    def test_str_carries_code(self) -> None:
        """Test string representation."""
        error = ForbiddenError("Target belongs to another unit")

        assert str(error) == "[forbidden] Target belongs to another unit"
        assert error.details == {}

    def test_explicit_code_overrides_default(self) -> None:
        """Test that a rejection keeps its specific code."""
        error = RejectedError("Plan is closed", code=DecisionCode.PLAN_CLOSED)

        assert error.code == DecisionCode.PLAN_CLOSED
        assert isinstance(error, GuardError)


class TestStoreUnavailableError:
    """Tests for store failures."""

    def test_str_includes_original_error(self) -> None:
        """Test that the cause is appended."""
        error = StoreUnavailableError("Record store unavailable", ConnectionError("timeout"))

        assert error.code == DecisionCode.STORE_UNAVAILABLE
        assert str(error) == "[store_unavailable] Record store unavailable: timeout"

    def test_str_without_original_error(self) -> None:
        """Test string representation without a cause."""
        assert str(StoreUnavailableError("down")) == "[store_unavailable] down"


class TestErrorFor:
    """Tests for the code to exception mapping."""

    @pytest.mark.parametrize(
        "code,error_class",
        [
            (DecisionCode.NOT_FOUND, NotFoundError),
            (DecisionCode.FORBIDDEN, ForbiddenError),
            (DecisionCode.INVALID_STATE, InvalidStateError),
            (DecisionCode.NOT_ENROLLED, RejectedError),
            (DecisionCode.INVALID_TRANSITION, RejectedError),
            (DecisionCode.DUPLICATE_MATRIX, RejectedError),
        ],
    )
    def test_mapping(self, code: DecisionCode, error_class: type[GuardError]) -> None:
        """Test that each code builds the expected class."""
        error = error_for(code, "refused", {"step": 1})

        assert type(error) is error_class
        assert error.code == code
        assert error.details == {"step": 1}

"""Status codes chosen for domain errors."""

from uuid import uuid4

import pytest

from roster.domain.people import PersonNotFoundError
from roster.domain.roles import DuplicateRoleNameError, InvalidRoleNameError
from roster.domain.shared import ConcurrencyError, DomainException, ErrorCode
from roster.presentation.api.exception_handlers import status_for


@pytest.mark.parametrize(
    ("exc", "expected"),
    [
        (InvalidRoleNameError("Role name cannot be empty"), 400),
        (PersonNotFoundError(uuid4()), 404),
        (DuplicateRoleNameError("Admin"), 409),
        (ConcurrencyError(), 409),
        (DomainException("boom"), 400),
    ],
)
def test_status_for_domain_errors(exc, expected):
    assert status_for(exc) == expected


def test_concurrency_error_keeps_its_own_code():
    exc = ConcurrencyError(details={"row_version": 3})

    assert exc.code is ErrorCode.CONCURRENCY_CONFLICT
    assert exc.details == {"row_version": 3}
    assert str(exc) == "The resource was modified by another request"

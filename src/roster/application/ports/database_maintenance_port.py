"""Database maintenance port. Interface for test-support operations."""

from typing import Protocol


class DatabaseMaintenancePort(Protocol):
    """Port for whole-database maintenance used by test tooling.

    These operations are not scoped to any user; they act on the complete
    People/Roles data set.
    """

    async def delete_people_and_roles(self) -> dict[str, int]:
        """Delete every person, role and role assignment.

        Returns
        -------
        Mapping of table name to number of deleted rows
        """
        ...

    async def table_counts(self) -> dict[str, int]:
        """Return row counts keyed by table name."""
        ...

    async def can_connect(self) -> bool:
        """Return True if a trivial query succeeds."""
        ...

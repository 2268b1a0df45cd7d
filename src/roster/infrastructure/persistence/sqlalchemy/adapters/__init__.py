from roster.infrastructure.persistence.sqlalchemy.adapters.database_maintenance_adapter import (  # NOQA: E501
    SqlAlchemyDatabaseMaintenanceAdapter,
)

__all__ = ["SqlAlchemyDatabaseMaintenanceAdapter"]

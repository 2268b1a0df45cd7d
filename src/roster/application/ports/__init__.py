from roster.application.ports.database_maintenance_port import (
    DatabaseMaintenancePort,
)

__all__ = ["DatabaseMaintenancePort"]

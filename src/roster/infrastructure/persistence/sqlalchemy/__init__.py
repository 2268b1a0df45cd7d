"""SQLAlchemy persistence for the roster."""

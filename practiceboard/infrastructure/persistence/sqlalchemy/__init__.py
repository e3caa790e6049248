"""SQLAlchemy persistence adapter for the assessment store."""

"""mediatracker - personal media collection tracker."""

__version__ = "0.3.0"

"""propjournal - trading journal and prop-firm compliance tracker."""

__version__ = "0.1.0"

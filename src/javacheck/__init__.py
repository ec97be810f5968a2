"""javacheck - structural checks for Java sources."""

__version__ = "0.3.0"

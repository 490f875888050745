"""Build, package and publish release artifacts for the safe_network binaries."""

__version__ = "0.1.0"

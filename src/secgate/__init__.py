"""SecGate - security and quality gate for container deployment bundles."""

__version__ = "0.1.0"

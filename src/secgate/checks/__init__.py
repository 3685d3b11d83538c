"""Check implementations grouped by the artifact they inspect."""

from secgate.checks.base import CheckContext, CheckSpec

__all__ = ["CheckContext", "CheckSpec"]

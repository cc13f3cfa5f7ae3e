"""Usage scanner engine — find which packages the source tree imports, and where."""

from pubsentinel.engines.usage_scanner.models import PackageUsage, SourceRole
from pubsentinel.engines.usage_scanner.scanner import role_for_path, scan_usage

__all__ = ["PackageUsage", "SourceRole", "role_for_path", "scan_usage"]

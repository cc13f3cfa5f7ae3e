"""Package categorization — retrieval chain and grouped manifest rendering."""

from pubsentinel.categorization.api_client import CategoryApiClient
from pubsentinel.categorization.cache import CategoryCache
from pubsentinel.categorization.categorizer import PackageCategorizer
from pubsentinel.categorization.grouping import (
    GroupingService,
    load_group_overrides,
    save_group_overrides,
)
from pubsentinel.categorization.models import GroupedDependencies, PackageCategory

__all__ = [
    "CategoryApiClient",
    "CategoryCache",
    "GroupedDependencies",
    "GroupingService",
    "PackageCategorizer",
    "PackageCategory",
    "load_group_overrides",
    "save_group_overrides",
]

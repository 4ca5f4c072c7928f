"""Data subpackage - catalog loading and shipped catalog files."""
from .catalog import Catalog, CatalogError

__all__ = ['Catalog', 'CatalogError']

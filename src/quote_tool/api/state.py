"""Shared API state: settings, catalog and the submission service."""
from functools import lru_cache

from ..config.settings import get_settings
from ..data.catalog import Catalog
from ..services.submission_service import SubmissionService


@lru_cache(maxsize=1)
def get_catalog() -> Catalog:
    """Load the configured catalog once per process."""
    settings = get_settings()
    if settings.catalog_workbook:
        return Catalog.from_excel(settings.catalog_workbook)
    return Catalog.from_csv_dir(settings.catalog_dir)


def get_submission_service() -> SubmissionService:
    return SubmissionService(settings=get_settings())

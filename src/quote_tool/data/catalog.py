"""
Catalog - read-only product data for the configurator.

Loads packages, add-ons, detail options and contract terms from CSV files
(one per collection) or from an Excel workbook with one sheet per
collection, validates them, and serves lookups by id.
"""
import logging
from pathlib import Path
from typing import Optional

import pandas as pd

from ..engine.models import Addon, BasePackage, ContractTerm, DetailOption

logger = logging.getLogger(__name__)

DEFAULT_CATALOG_DIR = Path(__file__).parent / 'files'

# Collection → (CSV file name, Excel sheet name, required columns)
SOURCES = {
    'packages': ('packages.csv', 'Packages', ['id', 'name', 'price', 'setup_fee']),
    'addons': ('addons.csv', 'Addons', ['id', 'name', 'price']),
    'detail_options': ('detail_options.csv', 'DetailOptions', ['attribute', 'id', 'label']),
    'contract_terms': ('contract_terms.csv', 'ContractTerms', ['id', 'label', 'discount']),
}


class CatalogError(ValueError):
    """Catalog data is missing or inconsistent."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__("Invalid catalog: " + "; ".join(errors))


def parse_bool(value: str) -> bool:
    """Parse a boolean from a CSV cell."""
    return str(value).strip().lower() in ('true', '1', 'yes', 'on', 'x')


def parse_int(value, default: int = 0) -> int:
    """Parse a whole currency amount. '399' and '399.0' pass, '399.9' does not."""
    value = str(value).strip()
    if not value or value.lower() == 'nan':
        return default
    number = float(value)
    if not number.is_integer():
        raise ValueError(f"'{value}' is not a whole amount")
    return int(number)


def parse_float(value, default: float = 0.0) -> float:
    value = str(value).strip()
    if not value or value.lower() == 'nan':
        return default
    return float(value)


def _rows(df: pd.DataFrame) -> list[dict]:
    df = df.fillna('')
    df.columns = [str(c).strip() for c in df.columns]
    for col in df.columns:
        df[col] = df[col].astype(str).str.strip()
    return df.to_dict(orient='records')


def validate_catalog(
    packages: list[BasePackage],
    addons: list[Addon],
    detail_options: list[DetailOption],
    contract_terms: list[ContractTerm],
) -> list[str]:
    """
    Check catalog consistency.

    Returns a list of error messages; empty when the catalog is valid.
    """
    errors = []

    def check_unique(kind: str, ids: list[str]):
        seen = set()
        for entry_id in ids:
            if not entry_id:
                errors.append(f"{kind}: empty id")
            elif entry_id in seen:
                errors.append(f"{kind}: duplicate id '{entry_id}'")
            seen.add(entry_id)

    check_unique("package", [p.id for p in packages])
    check_unique("add-on", [a.id for a in addons])
    check_unique("contract term", [t.id for t in contract_terms])

    for package in packages:
        if package.price < 0 or package.setup_fee < 0:
            errors.append(f"package '{package.id}': prices must be non-negative")

    for addon in addons:
        if addon.price < 0:
            errors.append(f"add-on '{addon.id}': price must be non-negative")

    groups: dict[str, list[DetailOption]] = {}
    for option in detail_options:
        groups.setdefault(option.attribute, []).append(option)
    for attribute, options in groups.items():
        check_unique(f"detail '{attribute}'", [o.id for o in options])
        if sum(1 for o in options if o.default) > 1:
            errors.append(f"detail '{attribute}': more than one default option")
        for option in options:
            if option.price < 0:
                errors.append(f"detail '{attribute}/{option.id}': price must be non-negative")
            if option.modifier < 0:
                errors.append(f"detail '{attribute}/{option.id}': modifier must be a surcharge (>= 0)")
            if option.price and option.modifier:
                errors.append(
                    f"detail '{attribute}/{option.id}': has both a flat price and a percentage modifier"
                )

    for term in contract_terms:
        if not 0 <= term.discount <= 1:
            errors.append(f"contract term '{term.id}': discount must be within 0..1")

    return errors


class Catalog:
    """Lookup service for the configurator's catalog entries."""

    def __init__(
        self,
        packages: list[BasePackage],
        addons: list[Addon],
        detail_options: list[DetailOption],
        contract_terms: list[ContractTerm],
    ):
        errors = validate_catalog(packages, addons, detail_options, contract_terms)
        if errors:
            raise CatalogError(errors)

        self._packages = {p.id: p for p in packages}
        self._addons = {a.id: a for a in addons}
        self._contract_terms = {t.id: t for t in contract_terms}
        self._details: dict[str, dict[str, DetailOption]] = {}
        for option in detail_options:
            self._details.setdefault(option.attribute, {})[option.id] = option

    # ------------------------------------------------------------------
    # Loaders
    # ------------------------------------------------------------------

    @classmethod
    def from_frames(cls, frames: dict[str, pd.DataFrame]) -> 'Catalog':
        """Build a catalog from one DataFrame per collection."""
        errors = []
        for key, (_, _, required) in SOURCES.items():
            if key not in frames:
                errors.append(f"missing collection '{key}'")
                continue
            missing = [c for c in required if c not in [str(col).strip() for col in frames[key].columns]]
            if missing:
                errors.append(f"{key}: missing columns {', '.join(missing)}")
        if errors:
            raise CatalogError(errors)

        try:
            packages = [
                BasePackage(
                    id=row['id'],
                    name=row['name'],
                    price=parse_int(row['price']),
                    setup_fee=parse_int(row['setup_fee']),
                    tier=row.get('tier', ''),
                )
                for row in _rows(frames['packages'])
            ]
            addons = [
                Addon(id=row['id'], name=row['name'], price=parse_int(row['price']))
                for row in _rows(frames['addons'])
            ]
            detail_options = [
                DetailOption(
                    attribute=row['attribute'],
                    id=row['id'],
                    label=row['label'],
                    price=parse_int(row.get('price', '')),
                    modifier=parse_float(row.get('modifier', '')),
                    default=parse_bool(row.get('default', '')),
                )
                for row in _rows(frames['detail_options'])
            ]
            contract_terms = [
                ContractTerm(
                    id=row['id'],
                    label=row['label'],
                    discount=parse_float(row['discount']),
                    months=parse_int(row.get('months', ''), default=1),
                )
                for row in _rows(frames['contract_terms'])
            ]
        except ValueError as e:
            raise CatalogError([f"invalid number: {e}"]) from e

        return cls(packages, addons, detail_options, contract_terms)

    @classmethod
    def from_csv_dir(cls, directory: Path) -> 'Catalog':
        """Load the catalog from a directory of CSV files."""
        directory = Path(directory)
        frames = {}
        missing = []
        for key, (filename, _, _) in SOURCES.items():
            path = directory / filename
            if not path.exists():
                missing.append(f"{filename} not found in {directory}")
                continue
            frames[key] = pd.read_csv(path, dtype=str, keep_default_na=False)
        if missing:
            raise CatalogError(missing)
        catalog = cls.from_frames(frames)
        logger.info("Loaded catalog from %s (%s)", directory, catalog.summary())
        return catalog

    @classmethod
    def from_excel(cls, workbook: Path) -> 'Catalog':
        """Load the catalog from a workbook with one sheet per collection."""
        workbook = Path(workbook)
        if not workbook.exists():
            raise CatalogError([f"{workbook} not found"])
        sheets = pd.read_excel(workbook, sheet_name=None, dtype=str)
        frames = {}
        for key, (_, sheet, _) in SOURCES.items():
            if sheet in sheets:
                frames[key] = sheets[sheet]
        catalog = cls.from_frames(frames)
        logger.info("Loaded catalog from %s (%s)", workbook, catalog.summary())
        return catalog

    @classmethod
    def default(cls) -> 'Catalog':
        """The catalog shipped with the package."""
        return cls.from_csv_dir(DEFAULT_CATALOG_DIR)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_base_package(self, package_id: str) -> Optional[BasePackage]:
        return self._packages.get(package_id)

    def get_addon(self, addon_id: str) -> Optional[Addon]:
        return self._addons.get(addon_id)

    def get_detail_option(self, attribute: str, option_id: str) -> Optional[DetailOption]:
        return self._details.get(attribute, {}).get(option_id)

    def get_contract_term(self, term_id: str) -> Optional[ContractTerm]:
        return self._contract_terms.get(term_id)

    def default_detail_option(self, attribute: str) -> Optional[DetailOption]:
        for option in self._details.get(attribute, {}).values():
            if option.default:
                return option
        return None

    def detail_attributes(self) -> list[str]:
        return list(self._details)

    # ------------------------------------------------------------------
    # Enumeration
    # ------------------------------------------------------------------

    @property
    def packages(self) -> list[BasePackage]:
        return list(self._packages.values())

    @property
    def addons(self) -> list[Addon]:
        return list(self._addons.values())

    @property
    def contract_terms(self) -> list[ContractTerm]:
        return list(self._contract_terms.values())

    def detail_options(self, attribute: str) -> list[DetailOption]:
        return list(self._details.get(attribute, {}).values())

    def summary(self) -> str:
        return (
            f"{len(self._packages)} packages, {len(self._addons)} add-ons, "
            f"{len(self._details)} detail groups, {len(self._contract_terms)} contract terms"
        )

    def to_dict(self) -> dict:
        """Enumeration of every collection for UI rendering."""
        return {
            "packages": [
                {"id": p.id, "name": p.name, "price": p.price, "setup_fee": p.setup_fee, "tier": p.tier}
                for p in self.packages
            ],
            "addons": [{"id": a.id, "name": a.name, "price": a.price} for a in self.addons],
            "details": {
                attribute: [
                    {
                        "id": o.id,
                        "label": o.label,
                        "price": o.price,
                        "modifier": o.modifier,
                        "default": o.default,
                    }
                    for o in options.values()
                ]
                for attribute, options in self._details.items()
            },
            "contract_terms": [
                {"id": t.id, "label": t.label, "discount": t.discount, "months": t.months}
                for t in self.contract_terms
            ],
        }

#!/usr/bin/env python
"""
Check pipeline - validates the catalog and runs the golden quote tests.

Usage:
    python scripts/build_all.py [catalog_dir_or_workbook]
"""
import subprocess
import sys
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from quote_tool.config.settings import get_settings
from quote_tool.data.catalog import Catalog, CatalogError


def load_catalog(source: Path) -> Catalog:
    if source.suffix.lower() in ('.xlsx', '.xlsm'):
        return Catalog.from_excel(source)
    return Catalog.from_csv_dir(source)


def main():
    print("=" * 60)
    print("QUOTE TOOL CHECK PIPELINE")
    print("=" * 60)
    print()

    settings = get_settings()
    if len(sys.argv) > 1:
        source = Path(sys.argv[1])
    else:
        source = settings.catalog_workbook or settings.catalog_dir

    print(f"[1/2] Validating catalog at {source}...")
    try:
        catalog = load_catalog(source)
    except CatalogError as e:
        print("\n❌ CATALOG INVALID")
        for error in e.errors:
            print(f"  ERROR: {error}")
        sys.exit(1)
    print(f"  {catalog.summary()}")

    print()
    print("[2/2] Running golden tests...")

    test_result = subprocess.run(
        [sys.executable, '-m', 'pytest', 'tests/test_golden_cases.py', '-v', '--tb=short'],
        cwd=Path(__file__).parent.parent
    )

    if test_result.returncode != 0:
        print("\n❌ TESTS FAILED")
        sys.exit(1)

    print()
    print("=" * 60)
    print("✅ CHECK COMPLETE")
    print("=" * 60)
    print()
    print("Packages:")
    for package in catalog.packages:
        print(f"  {package.id}: {package.price}€/Monat, Setup {package.setup_fee}€")
    print("Contract terms:")
    for term in catalog.contract_terms:
        print(f"  {term.id}: {term.discount:.0%} Rabatt")


if __name__ == "__main__":
    main()

"""Tests for catalog loading, validation and lookups."""
import pandas as pd
import pytest

from quote_tool.data.catalog import Catalog, CatalogError
from quote_tool.engine.models import Addon, BasePackage, ContractTerm, DetailOption


def test_default_catalog_contents(default_catalog):
    """The shipped catalog carries the site's packages, add-ons and terms."""
    assert [p.id for p in default_catalog.packages] == [
        'basic-website', 'professional-website', 'premium-website'
    ]
    assert [p.price for p in default_catalog.packages] == [399, 599, 799]
    assert default_catalog.get_addon('ai-integration').price == 299
    assert default_catalog.get_contract_term('biannual').discount == 0.15
    assert default_catalog.detail_attributes() == ['company-size', 'locations', 'support']


def test_lookups_return_none_for_unknown_ids(default_catalog):
    assert default_catalog.get_base_package('nope') is None
    assert default_catalog.get_addon('nope') is None
    assert default_catalog.get_contract_term('nope') is None
    assert default_catalog.get_detail_option('support', 'medium') is None
    assert default_catalog.get_detail_option('nope', 'medium') is None


def test_detail_options_and_defaults(default_catalog):
    medium = default_catalog.get_detail_option('company-size', 'medium')
    assert medium.modifier == pytest.approx(0.10)
    assert medium.is_percentage

    priority = default_catalog.get_detail_option('support', 'priority')
    assert priority.price == 99
    assert not priority.is_percentage

    assert default_catalog.default_detail_option('locations').id == 'single'


def test_to_dict_enumerates_every_collection(default_catalog):
    data = default_catalog.to_dict()
    assert len(data['packages']) == 3
    assert len(data['addons']) == 6
    assert [o['id'] for o in data['details']['support']] == ['standard', 'priority', 'premium']
    assert data['contract_terms'][1] == {'id': 'annual', 'label': 'Jährlich', 'discount': 0.1, 'months': 12}


@pytest.mark.parametrize("options, terms, expected", [
    (
        [DetailOption('size', 'xl', 'XL', modifier=-0.1)],
        [ContractTerm('monthly', 'Monatlich', 0.0)],
        "modifier must be a surcharge",
    ),
    (
        [DetailOption('support', 'vip', 'VIP', price=50, modifier=0.1)],
        [ContractTerm('monthly', 'Monatlich', 0.0)],
        "both a flat price and a percentage modifier",
    ),
    (
        [DetailOption('size', 's', 'S', default=True), DetailOption('size', 'm', 'M', default=True)],
        [ContractTerm('monthly', 'Monatlich', 0.0)],
        "more than one default",
    ),
    (
        [],
        [ContractTerm('forever', 'Für immer', 1.5)],
        "discount must be within 0..1",
    ),
    (
        [],
        [ContractTerm('monthly', 'Monatlich', 0.0), ContractTerm('monthly', 'Monatlich', 0.0)],
        "duplicate id 'monthly'",
    ),
])
def test_invalid_catalog_rejected(options, terms, expected):
    with pytest.raises(CatalogError) as excinfo:
        Catalog(
            packages=[BasePackage('basic-website', 'Essential Website', 399, 1500)],
            addons=[Addon('ai-integration', 'KI-Integration', 299)],
            detail_options=options,
            contract_terms=terms,
        )
    assert any(expected in error for error in excinfo.value.errors), excinfo.value.errors


def test_missing_csv_file_reported(tmp_path):
    (tmp_path / 'packages.csv').write_text("id,name,price,setup_fee\nbasic,Basic,399,1500\n", encoding='utf-8')

    with pytest.raises(CatalogError) as excinfo:
        Catalog.from_csv_dir(tmp_path)
    assert any('addons.csv' in error for error in excinfo.value.errors)


def test_missing_columns_reported():
    frames = {
        'packages': pd.DataFrame({'id': ['basic'], 'name': ['Basic'], 'price': ['399']}),
        'addons': pd.DataFrame({'id': [], 'name': [], 'price': []}),
        'detail_options': pd.DataFrame({'attribute': [], 'id': [], 'label': []}),
        'contract_terms': pd.DataFrame({'id': ['monthly'], 'label': ['Monatlich'], 'discount': ['0']}),
    }
    with pytest.raises(CatalogError) as excinfo:
        Catalog.from_frames(frames)
    assert excinfo.value.errors == ['packages: missing columns setup_fee']


@pytest.mark.parametrize("package_price, addon_price, expected", [
    ('399.9', '99', "'399.9' is not a whole amount"),
    ('399', '99.5', "'99.5' is not a whole amount"),
    ('399', 'abc', "could not convert"),
])
def test_fractional_or_garbled_prices_rejected(package_price, addon_price, expected):
    frames = {
        'packages': pd.DataFrame(
            {'id': ['basic'], 'name': ['Basic'], 'price': [package_price], 'setup_fee': ['1500']}
        ),
        'addons': pd.DataFrame({'id': ['whatsapp'], 'name': ['WhatsApp'], 'price': [addon_price]}),
        'detail_options': pd.DataFrame({'attribute': [], 'id': [], 'label': []}),
        'contract_terms': pd.DataFrame({'id': ['monthly'], 'label': ['Monatlich'], 'discount': ['0']}),
    }
    with pytest.raises(CatalogError) as excinfo:
        Catalog.from_frames(frames)
    assert any(expected in error for error in excinfo.value.errors), excinfo.value.errors


def test_whole_amounts_written_as_floats_load():
    """Spreadsheet exports often write 399 as 399.0."""
    frames = {
        'packages': pd.DataFrame(
            {'id': ['basic'], 'name': ['Basic'], 'price': ['399.0'], 'setup_fee': ['1500.0']}
        ),
        'addons': pd.DataFrame({'id': ['whatsapp'], 'name': ['WhatsApp'], 'price': ['99']}),
        'detail_options': pd.DataFrame({'attribute': [], 'id': [], 'label': []}),
        'contract_terms': pd.DataFrame({'id': ['monthly'], 'label': ['Monatlich'], 'discount': ['0']}),
    }
    catalog = Catalog.from_frames(frames)
    assert catalog.get_base_package('basic').price == 399
    assert catalog.get_base_package('basic').setup_fee == 1500


def test_excel_workbook_loads_like_csv(tmp_path, default_catalog):
    """A workbook with one sheet per collection yields the same catalog."""
    data = default_catalog.to_dict()
    details = [
        {'attribute': attribute, **option}
        for attribute, options in data['details'].items()
        for option in options
    ]
    workbook = tmp_path / 'catalog.xlsx'
    with pd.ExcelWriter(workbook, engine='openpyxl') as writer:
        pd.DataFrame(data['packages']).to_excel(writer, sheet_name='Packages', index=False)
        pd.DataFrame(data['addons']).to_excel(writer, sheet_name='Addons', index=False)
        pd.DataFrame(details).to_excel(writer, sheet_name='DetailOptions', index=False)
        pd.DataFrame(data['contract_terms']).to_excel(writer, sheet_name='ContractTerms', index=False)

    loaded = Catalog.from_excel(workbook)

    assert loaded.to_dict() == data


def test_missing_workbook_reported(tmp_path):
    with pytest.raises(CatalogError):
        Catalog.from_excel(tmp_path / 'missing.xlsx')

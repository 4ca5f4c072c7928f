"""
Pricing - pure quote price computation.

Derives the price snapshot from a selection state and the catalog:

    subtotal = round((base + addons + support) * modifier)
    discount = round(subtotal * contract discount rate)
    total    = subtotal - discount
    setup    = round(package setup fee * modifier)

Arithmetic runs in Decimal so that catalog fractions such as 0.10 and 1.15
multiply exactly. Rounding is applied once per derived field.
"""
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_EVEN, ROUND_HALF_UP
from typing import TYPE_CHECKING, Optional

from .models import DetailOption, PriceSnapshot, Selection, TraceStep

if TYPE_CHECKING:
    from ..data.catalog import Catalog


ROUNDING_MODES = {
    'half_up': ROUND_HALF_UP,
    'half_even': ROUND_HALF_EVEN,
}

MODIFIER_MODES = ('multiplicative', 'additive')


@dataclass(frozen=True)
class PricingPolicy:
    """
    Numeric rules for the price computation.

    rounding: 'half_up' (half away from zero for the non-negative amounts
        used here) or 'half_even' (banker's rounding).
    modifier_mode: 'multiplicative' multiplies (1 + m) over all surcharges,
        'additive' sums the surcharges onto 1.
    """
    rounding: str = 'half_up'
    modifier_mode: str = 'multiplicative'

    def __post_init__(self):
        if self.rounding not in ROUNDING_MODES:
            raise ValueError(
                f"Unknown rounding mode '{self.rounding}', expected one of {sorted(ROUNDING_MODES)}"
            )
        if self.modifier_mode not in MODIFIER_MODES:
            raise ValueError(
                f"Unknown modifier mode '{self.modifier_mode}', expected one of {list(MODIFIER_MODES)}"
            )


DEFAULT_POLICY = PricingPolicy()


def to_decimal(value) -> Decimal:
    """Convert a catalog number to Decimal via its shortest repr."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_amount(value, rounding: str = 'half_up') -> int:
    """Round a currency amount to whole units using the given mode."""
    return int(to_decimal(value).quantize(Decimal('1'), rounding=ROUNDING_MODES[rounding]))


def effective_details(catalog: "Catalog", selection: Selection) -> dict[str, DetailOption]:
    """
    Resolve the active option per detail attribute.

    Explicit choices win; otherwise the attribute's default option applies.
    Attributes without a choice and without a default are left out.
    """
    resolved = {}
    for attribute in catalog.detail_attributes():
        option_id = selection.details.get(attribute)
        if option_id is not None:
            option = catalog.get_detail_option(attribute, option_id)
        else:
            option = catalog.default_detail_option(attribute)
        if option is not None:
            resolved[attribute] = option
    return resolved


def combine_modifiers(modifiers: list, mode: str = 'multiplicative') -> Decimal:
    """Combine percentage surcharges into a single price multiplier."""
    combined = Decimal('1')
    if mode == 'additive':
        for m in modifiers:
            combined += to_decimal(m)
    else:
        for m in modifiers:
            combined *= Decimal('1') + to_decimal(m)
    return combined


def _price(
    catalog: "Catalog",
    selection: Selection,
    policy: PricingPolicy,
    trace: Optional[list[TraceStep]] = None,
) -> PriceSnapshot:
    def note(step: str, description: str, value: Optional[str] = None):
        if trace is not None:
            trace.append(TraceStep(step=step, description=description, value=value))

    base = selection.base.price if selection.base else 0
    if selection.base:
        note("Base Package", selection.base.name, f"{base}€")
    else:
        note("Base Package", "No package selected", "0€")

    addons = sum(addon.price for addon in selection.addons.values())
    for addon in selection.addons.values():
        note("Add-on", addon.name, f"+{addon.price}€")

    details = effective_details(catalog, selection)
    support = sum(option.price for option in details.values() if not option.is_percentage)
    if support:
        note("Support", "Flat-priced detail options", f"+{support}€")

    surcharges = [option for option in details.values() if option.is_percentage]
    for option in surcharges:
        note("Surcharge", f"{option.attribute}: {option.label}", f"+{option.modifier:.0%}")
    modifier = combine_modifiers([o.modifier for o in surcharges], policy.modifier_mode)
    note("Modifier", f"Combined {policy.modifier_mode} surcharge factor", f"{modifier.normalize()}")

    subtotal = round_amount((base + addons + support) * modifier, policy.rounding)
    note("Subtotal", f"({base} + {addons} + {support}) × {modifier.normalize()}", f"{subtotal}€")

    discount = 0
    if selection.contract and selection.contract.discount:
        rate = to_decimal(selection.contract.discount)
        discount = round_amount(subtotal * rate, policy.rounding)
        note("Discount", f"{selection.contract.label} ({float(rate):.0%})", f"-{discount}€")

    total = subtotal - discount
    note("Total", "Monthly total", f"{total}€")

    setup_fee = selection.base.setup_fee if selection.base else 0
    setup = round_amount(setup_fee * modifier, policy.rounding)
    note("Setup", f"{setup_fee} × {modifier.normalize()}", f"{setup}€")

    return PriceSnapshot(
        base=base,
        addons=addons,
        support=support,
        modifier=float(modifier),
        subtotal=subtotal,
        discount=discount,
        total=total,
        setup=setup,
    )


def compute_snapshot(
    catalog: "Catalog",
    selection: Selection,
    policy: PricingPolicy = DEFAULT_POLICY,
) -> PriceSnapshot:
    """Compute the price snapshot for a selection. Pure function."""
    return _price(catalog, selection, policy)


def explain_snapshot(
    catalog: "Catalog",
    selection: Selection,
    policy: PricingPolicy = DEFAULT_POLICY,
) -> tuple[PriceSnapshot, list[TraceStep]]:
    """
    Compute the snapshot along with a trace of every pricing step.

    Returns (snapshot, trace_steps).
    """
    trace: list[TraceStep] = []
    snapshot = _price(catalog, selection, policy, trace)
    return snapshot, trace

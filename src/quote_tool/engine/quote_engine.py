"""
Quote Engine - selection state, step gating and quote generation.

One engine instance serves one configurator session. Every mutating
operation validates its arguments against the catalog before touching
state, then recomputes the price snapshot eagerly, so observers never
see a stale snapshot.
"""
import logging
from datetime import datetime, timezone
from typing import Iterable, Mapping, Optional

from .errors import IncompleteSelection, InvalidStepTransition, UnknownCatalogEntry
from .models import (
    TOTAL_STEPS,
    PriceSnapshot,
    QuoteRecord,
    QuotedContract,
    QuotedItem,
    SelectedItem,
    Selection,
    TraceStep,
    WizardStep,
)
from .pricing import DEFAULT_POLICY, PricingPolicy, compute_snapshot, effective_details, explain_snapshot

logger = logging.getLogger(__name__)


class QuoteEngine:
    """
    Four-step price configurator.

    Steps:
    1. Choose base package (required to move on)
    2. Choose add-ons (optional)
    3. Choose details (optional, or at least `min_details_for_contract_step`
       explicit choices when configured stricter)
    4. Choose contract term (required to generate a quote)
    """

    def __init__(
        self,
        catalog,
        policy: Optional[PricingPolicy] = None,
        min_details_for_contract_step: int = 0,
    ):
        self.catalog = catalog
        self.policy = policy or DEFAULT_POLICY
        self.min_details_for_contract_step = min_details_for_contract_step
        self.selection = Selection()
        self.current_step = int(WizardStep.CHOOSE_BASE)
        self._snapshot = compute_snapshot(self.catalog, self.selection, self.policy)

    @classmethod
    def configured(
        cls,
        catalog,
        base: Optional[str] = None,
        addons: Iterable[str] = (),
        details: Optional[Mapping[str, str]] = None,
        contract: Optional[str] = None,
        **options,
    ) -> 'QuoteEngine':
        """Build an engine by replaying a complete selection."""
        engine = cls(catalog, **options)
        if base:
            engine.select_base(base)
        for addon_id in addons:
            engine.toggle_addon(addon_id, True)
        for attribute, option_id in (details or {}).items():
            engine.set_detail(attribute, option_id)
        if contract:
            engine.select_contract(contract)
        return engine

    # ------------------------------------------------------------------
    # Selection operations
    # ------------------------------------------------------------------

    def select_base(self, package_id: str) -> PriceSnapshot:
        """Select the base package, replacing any previous one."""
        package = self.catalog.get_base_package(package_id)
        if package is None:
            raise UnknownCatalogEntry("base package", package_id)
        self.selection.base = package
        logger.debug("Selected base package %s", package_id)
        return self._recompute()

    def toggle_addon(self, addon_id: str, included: bool) -> PriceSnapshot:
        """Include or exclude an add-on. Idempotent in both directions."""
        addon = self.catalog.get_addon(addon_id)
        if addon is None:
            raise UnknownCatalogEntry("add-on", addon_id)
        if included:
            self.selection.addons.setdefault(addon.id, addon)
        else:
            self.selection.addons.pop(addon.id, None)
        return self._recompute()

    def set_detail(self, attribute: str, option_id: str) -> PriceSnapshot:
        """Set the active option of a detail attribute (last write wins)."""
        option = self.catalog.get_detail_option(attribute, option_id)
        if option is None:
            raise UnknownCatalogEntry("detail option", option_id, attribute=attribute)
        self.selection.details[attribute] = option.id
        return self._recompute()

    def select_contract(self, term_id: str) -> PriceSnapshot:
        """Select the contract term, replacing any previous one."""
        term = self.catalog.get_contract_term(term_id)
        if term is None:
            raise UnknownCatalogEntry("contract term", term_id)
        self.selection.contract = term
        return self._recompute()

    def reset(self):
        """Discard the selection and return to the first step."""
        self.selection = Selection()
        self.current_step = int(WizardStep.CHOOSE_BASE)
        self._recompute()

    # ------------------------------------------------------------------
    # Pricing
    # ------------------------------------------------------------------

    def _recompute(self) -> PriceSnapshot:
        self._snapshot = compute_snapshot(self.catalog, self.selection, self.policy)
        return self._snapshot

    @property
    def snapshot(self) -> PriceSnapshot:
        """The price snapshot of the current selection."""
        return self._snapshot

    def compute_snapshot(self) -> PriceSnapshot:
        """Recompute the snapshot from scratch."""
        return self._recompute()

    def explain(self) -> list[TraceStep]:
        """Trace of the pricing computation for the current selection."""
        _, trace = explain_snapshot(self.catalog, self.selection, self.policy)
        return trace

    def selected_items(self) -> list[SelectedItem]:
        """Summary lines for display: base, add-ons, priced details, contract."""
        items = []
        if self.selection.base:
            items.append(SelectedItem(self.selection.base.name, self.selection.base.price, "base"))
        for addon in self.selection.addons.values():
            items.append(SelectedItem(addon.name, addon.price, "addon"))
        for option in effective_details(self.catalog, self.selection).values():
            if not option.is_percentage and option.price > 0:
                items.append(SelectedItem(option.label, option.price, "detail"))
        if self.selection.contract:
            items.append(SelectedItem(self.selection.contract.label, None, "contract"))
        return items

    # ------------------------------------------------------------------
    # Wizard navigation
    # ------------------------------------------------------------------

    @property
    def total_steps(self) -> int:
        return TOTAL_STEPS

    def step_complete(self, step: int) -> bool:
        """Whether the given step's completion predicate holds."""
        if step == WizardStep.CHOOSE_BASE:
            return self.selection.base is not None
        if step == WizardStep.CHOOSE_DETAILS:
            return len(self.selection.details) >= self.min_details_for_contract_step
        if step == WizardStep.CHOOSE_CONTRACT:
            return self.selection.contract is not None
        return True

    @property
    def can_advance(self) -> bool:
        return self.current_step < TOTAL_STEPS and self.step_complete(self.current_step)

    @property
    def can_retreat(self) -> bool:
        return self.current_step > 1

    @property
    def can_generate_quote(self) -> bool:
        return (
            self.current_step == TOTAL_STEPS
            and self.selection.base is not None
            and self.selection.contract is not None
        )

    def advance(self) -> int:
        """Move to the next step if the current one is complete."""
        target = self.current_step + 1
        if self.current_step >= TOTAL_STEPS:
            raise InvalidStepTransition(self.current_step, target, "already at the last step")
        if not self.step_complete(self.current_step):
            raise InvalidStepTransition(
                self.current_step, target, f"step {self.current_step} is incomplete"
            )
        self.current_step = target
        return self.current_step

    def retreat(self) -> int:
        """Move back one step. Never validates the selection."""
        if self.current_step <= 1:
            raise InvalidStepTransition(self.current_step, self.current_step - 1, "already at the first step")
        self.current_step -= 1
        return self.current_step

    def go_to_step(self, step: int) -> int:
        """
        Jump to a step.

        Backwards jumps always succeed; forward jumps require every step
        passed over to be complete.
        """
        if not 1 <= step <= TOTAL_STEPS:
            raise InvalidStepTransition(self.current_step, step, f"step must be within 1..{TOTAL_STEPS}")
        for intermediate in range(self.current_step, step):
            if not self.step_complete(intermediate):
                raise InvalidStepTransition(self.current_step, step, f"step {intermediate} is incomplete")
        self.current_step = step
        return self.current_step

    # ------------------------------------------------------------------
    # Quote generation
    # ------------------------------------------------------------------

    def generate_quote(self, now: Optional[datetime] = None) -> QuoteRecord:
        """
        Freeze the current configuration into a QuoteRecord.

        Raises IncompleteSelection unless base package and contract are chosen.
        """
        missing = []
        if self.selection.base is None:
            missing.append("base")
        if self.selection.contract is None:
            missing.append("contract")
        if missing:
            raise IncompleteSelection(missing)

        base = self.selection.base
        contract = self.selection.contract
        details = {
            attribute: option.id
            for attribute, option in effective_details(self.catalog, self.selection).items()
        }
        record = QuoteRecord(
            base=QuotedItem(id=base.id, name=base.name, price=base.price),
            addons=tuple(
                QuotedItem(id=a.id, name=a.name, price=a.price)
                for a in self.selection.addons.values()
            ),
            details=details,
            contract=QuotedContract(id=contract.id, label=contract.label, discount=contract.discount),
            prices=self.compute_snapshot(),
            created_at=now or datetime.now(timezone.utc),
        )
        logger.info(
            "Generated quote: base=%s addons=%d contract=%s total=%s",
            base.id, len(record.addons), contract.id, record.total,
        )
        return record

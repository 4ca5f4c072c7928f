"""
Data models for the quote engine.

Catalog entries and quote records are frozen dataclasses; only the
selection state is mutable and it is owned by the engine.
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum
from types import MappingProxyType
from typing import Mapping, Optional


class WizardStep(IntEnum):
    """The four configurator steps, in order."""
    CHOOSE_BASE = 1
    CHOOSE_ADDONS = 2
    CHOOSE_DETAILS = 3
    CHOOSE_CONTRACT = 4


TOTAL_STEPS = len(WizardStep)


@dataclass(frozen=True)
class BasePackage:
    """A recurring-price website package."""
    id: str
    name: str
    price: int
    setup_fee: int
    tier: str = ""


@dataclass(frozen=True)
class Addon:
    """An optional module stacked on the base package."""
    id: str
    name: str
    price: int


@dataclass(frozen=True)
class DetailOption:
    """
    One option of a detail attribute group.

    Carries either a flat monthly price (support level) or a percentage
    surcharge (company size, locations).
    """
    attribute: str
    id: str
    label: str
    price: int = 0
    modifier: float = 0.0
    default: bool = False

    @property
    def is_percentage(self) -> bool:
        return self.modifier != 0


@dataclass(frozen=True)
class ContractTerm:
    """A commitment duration with its discount rate."""
    id: str
    label: str
    discount: float
    months: int = 1


@dataclass
class Selection:
    """Mutable selection state of one configurator session."""
    base: Optional[BasePackage] = None
    addons: dict[str, Addon] = field(default_factory=dict)  # insertion-ordered, unique by id
    details: dict[str, str] = field(default_factory=dict)  # attribute → option id
    contract: Optional[ContractTerm] = None


@dataclass(frozen=True)
class TraceStep:
    """A single step in the pricing trace."""
    step: str
    description: str
    value: Optional[str] = None


@dataclass(frozen=True)
class PriceSnapshot:
    """Derived prices for one selection state."""
    base: int = 0
    addons: int = 0
    support: int = 0
    modifier: float = 1.0
    subtotal: int = 0
    discount: int = 0
    total: int = 0
    setup: int = 0

    def to_dict(self) -> dict:
        return {
            "base": self.base,
            "addons": self.addons,
            "support": self.support,
            "modifier": self.modifier,
            "subtotal": self.subtotal,
            "discount": self.discount,
            "total": self.total,
            "setup": self.setup,
        }


@dataclass(frozen=True)
class SelectedItem:
    """A summary line: label and monthly price (None for the contract line)."""
    label: str
    price: Optional[int]
    kind: str


@dataclass(frozen=True)
class QuotedItem:
    id: str
    name: str
    price: int

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "price": self.price}


@dataclass(frozen=True)
class QuotedContract:
    id: str
    label: str
    discount: float

    def to_dict(self) -> dict:
        return {"id": self.id, "label": self.label, "discount": self.discount}


@dataclass(frozen=True)
class QuoteRecord:
    """
    Immutable snapshot of a completed configuration.

    This is the only artifact handed to the submission gateway.
    """
    base: QuotedItem
    addons: tuple[QuotedItem, ...]
    details: Mapping[str, str]
    contract: QuotedContract
    prices: PriceSnapshot
    created_at: datetime

    def __post_init__(self):
        # Freeze the details map so the record cannot drift from the engine
        object.__setattr__(self, "details", MappingProxyType(dict(self.details)))

    @property
    def total(self) -> int:
        return self.prices.total

    @property
    def setup(self) -> int:
        return self.prices.setup

    def to_dict(self) -> dict:
        """JSON-compatible structure for the submission payload."""
        return {
            "base": self.base.to_dict(),
            "addons": [addon.to_dict() for addon in self.addons],
            "details": dict(self.details),
            "contract": self.contract.to_dict(),
            "prices": self.prices.to_dict(),
            "total": self.total,
            "setup": self.setup,
            "timestamp": self.created_at.isoformat(),
        }

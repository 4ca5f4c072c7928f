"""Engine subpackage - selection state, pricing and step gating."""
from .quote_engine import QuoteEngine
from .pricing import PricingPolicy, compute_snapshot
from .models import PriceSnapshot, QuoteRecord, WizardStep
from .errors import QuoteEngineError, UnknownCatalogEntry, IncompleteSelection, InvalidStepTransition

__all__ = [
    'QuoteEngine', 'PricingPolicy', 'compute_snapshot',
    'PriceSnapshot', 'QuoteRecord', 'WizardStep',
    'QuoteEngineError', 'UnknownCatalogEntry', 'IncompleteSelection', 'InvalidStepTransition',
]

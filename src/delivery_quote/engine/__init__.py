"""Engine subpackage - draft models, stop operations and pricing logic."""
from .pricing_engine import PricingEngine, calculate_price
from .models import Draft, Stop, TaskType, PricingBreakdown

__all__ = ['PricingEngine', 'calculate_price', 'Draft', 'Stop', 'TaskType', 'PricingBreakdown']

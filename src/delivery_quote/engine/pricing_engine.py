"""
Pricing Engine - Maps an order draft to an itemized price breakdown.

Pricing is a pure function of the draft and the rate tables:
- Base fare and distance rate come from one designated fulfillment mode
- Distance is a fixed placeholder until real geolocation is available
- Weight, size and service fees are looked up from the selected brackets
- Per-stop and monitoring fees scale with the stop count
- The total is clamped at zero (service discounts can be negative)

A second, flat formula is kept for the price historically stamped on
submitted orders so both values can be compared.
"""
import logging
from typing import Optional

from ..config.settings import get_settings, Settings
from ..data.rate_tables import RateTables, get_rate_tables
from .models import Draft, PricingBreakdown

logger = logging.getLogger(__name__)

CURRENCY = "₱"


def _package_fees(draft: Draft, rates: RateTables, mode: str, multistop_package_pricing: str) -> tuple[int, int]:
    """Weight and size fees under the chosen multi-stop interpretation."""
    task_type = draft.task_type

    if draft.is_multistop and multistop_package_pricing == 'per_stop':
        weight_fee = sum(
            rates.weight_fee(stop.weight, task_type, mode) * stop.item_count
            for stop in draft.stops
        )
        size_fee = sum(rates.size_fee(stop.size, task_type) for stop in draft.stops)
        return weight_fee, size_fee

    # Single-item selectors, also for multi-stop orders where they are not shown
    return rates.weight_fee(draft.weight, task_type, mode), rates.size_fee(draft.size, task_type)


def calculate_price(
    draft: Draft,
    rates: RateTables,
    fulfillment_mode: str = 'drone',
    multistop_package_pricing: str = 'selector',
) -> PricingBreakdown:
    """
    Calculate the itemized price of a draft.

    Args:
        draft: Draft snapshot to price
        rates: Rate tables to price against
        fulfillment_mode: Mode whose base fare and distance rate are used
        multistop_package_pricing: "selector" uses the single-item weight/size
            selectors for every order; "per_stop" sums the stop packages
            for multi-stop orders

    Returns:
        PricingBreakdown with fee components, total and trace
    """
    mode = fulfillment_mode
    stop_count = draft.stop_count

    base_fare = rates.base_fares[mode]
    distance_rate = rates.distance_rates[mode]
    distance_fee = rates.distance_km * distance_rate

    weight_fee, size_fee = _package_fees(draft, rates, mode, multistop_package_pricing)
    service_fee = rates.service_fee(draft.service_type)

    stop_fee = stop_count * rates.per_stop_fee
    monitoring_fee = stop_count * rates.per_stop_monitoring_fee

    insurance_fee = rates.insurance_fee if draft.insurance else 0
    platform_fee = rates.platform_fee

    subtotal = (
        base_fare + distance_fee + weight_fee + size_fee + service_fee
        + stop_fee + monitoring_fee + insurance_fee + platform_fee
    )

    breakdown = PricingBreakdown(
        base_fare=base_fare,
        distance_fee=distance_fee,
        weight_fee=weight_fee,
        size_fee=size_fee,
        service_fee=service_fee,
        stop_fee=stop_fee,
        monitoring_fee=monitoring_fee,
        insurance_fee=insurance_fee,
        platform_fee=platform_fee,
        total=max(0, subtotal),
        fulfillment_mode=mode,
        rates_hash=rates.rates_hash or None,
    )

    breakdown.add_trace("Base Fare", f"{mode} base fare", format_amount(base_fare))
    breakdown.add_trace(
        "Distance", f"{rates.distance_km} km × {format_amount(distance_rate)}/km", format_amount(distance_fee)
    )
    if draft.is_multistop and multistop_package_pricing == 'per_stop':
        breakdown.add_trace("Package", f"Summed over {stop_count} stop package(s)", format_amount(weight_fee + size_fee))
    else:
        breakdown.add_trace("Weight", f"Bracket {draft.weight}", format_amount(weight_fee))
        breakdown.add_trace("Size", f"Bracket {draft.size}", format_amount(size_fee))
    breakdown.add_trace("Service", f"Service level {draft.service_type}", format_fee_delta(service_fee))
    if stop_count:
        breakdown.add_trace("Stops", f"{stop_count} stop(s) incl. monitoring", format_amount(stop_fee + monitoring_fee))
    if draft.insurance:
        breakdown.add_trace("Insurance", "Package insurance", format_amount(insurance_fee))
    if subtotal < 0:
        breakdown.add_trace("Total", f"Subtotal {subtotal} clamped to zero", format_amount(0))
    else:
        breakdown.add_trace("Total", "Including platform fee", format_amount(breakdown.total))

    return breakdown


def calculate_legacy_submission_price(draft: Draft, rates: RateTables) -> int:
    """Flat price formerly stamped on submitted orders: base + distance + per-stop."""
    return rates.legacy_base_fare + rates.legacy_distance_fee + draft.stop_count * rates.legacy_per_stop_fee


def format_amount(amount: int) -> str:
    return f"{CURRENCY}{amount}"


def format_fee_delta(amount: int) -> str:
    """Render a service fee delta, e.g. '+₱40', '-₱10' or 'No extra charge'."""
    if amount > 0:
        return f"+{CURRENCY}{amount}"
    if amount < 0:
        return f"-{CURRENCY}{abs(amount)}"
    return "No extra charge"


class PricingEngine:
    """
    Prices drafts using the configured fulfillment mode and policies.

    The engine only holds configuration; every call recomputes from the
    draft it is given.
    """

    def __init__(self, settings: Optional[Settings] = None, rate_tables: Optional[RateTables] = None):
        """Initialize engine with settings and rate tables."""
        self.settings = settings or get_settings()
        self.rates = rate_tables or get_rate_tables()

        if self.settings.fulfillment_mode not in self.rates.base_fares:
            raise ValueError(
                f"No base fare for fulfillment mode '{self.settings.fulfillment_mode}' in rate tables."
            )

    def calculate(self, draft: Draft) -> PricingBreakdown:
        """Calculate the price breakdown shown during review."""
        return calculate_price(
            draft,
            self.rates,
            fulfillment_mode=self.settings.fulfillment_mode,
            multistop_package_pricing=self.settings.multistop_package_pricing,
        )

    def legacy_submission_price(self, draft: Draft) -> int:
        return calculate_legacy_submission_price(draft, self.rates)

    def submission_price(self, draft: Draft) -> int:
        """
        Price stamped on the submitted order.

        Uses the review breakdown total unless settings select the legacy
        flat formula.
        """
        if self.settings.submission_price_source == 'legacy':
            return self.legacy_submission_price(draft)
        return self.calculate(draft).total

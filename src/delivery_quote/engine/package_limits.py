"""
Package Limits - Advisory checks for multi-stop packages.

Multi-stop deliveries only carry the lighter and smaller brackets. A stop
outside those brackets is flagged with a warning that suggests sending it
as a separate single-item order. Warnings never block the wizard.
"""
from dataclasses import dataclass
from typing import Iterable

from ..data.rate_tables import RateTables
from .models import Draft, Stop

SEPARATE_ORDER_HINT = 'Consider sending this as a separate "Send an Item" delivery.'


@dataclass(frozen=True)
class StopSummary:
    """Totals shown under the per-stop package forms."""
    total_items: int
    total_weight_kg: int  # lower bound of each bracket times item count
    exceeds_limits: bool


def exceeds_weight_limit(stop: Stop, rates: RateTables) -> bool:
    return stop.weight not in rates.multistop_allowed_weights


def exceeds_size_limit(stop: Stop, rates: RateTables) -> bool:
    return stop.size not in rates.multistop_allowed_sizes


def stop_limit_warnings(stop: Stop, rates: RateTables) -> list[str]:
    """Warning messages for one stop; empty when it fits multi-stop limits."""
    warnings = []
    if exceeds_weight_limit(stop, rates):
        warnings.append("Package exceeds weight limit for multi-stop delivery.")
    if exceeds_size_limit(stop, rates):
        warnings.append("Package exceeds size limit for multi-stop delivery.")
    if warnings:
        warnings.append(SEPARATE_ORDER_HINT)
    return warnings


def flagged_stops(draft: Draft, rates: RateTables) -> dict[int, list[str]]:
    """Map of stop position -> warnings, for multi-stop drafts only."""
    if not draft.is_multistop:
        return {}

    flagged = {}
    for i, stop in enumerate(draft.stops):
        warnings = stop_limit_warnings(stop, rates)
        if warnings:
            flagged[i] = warnings
    return flagged


def summarize_stops(stops: Iterable[Stop], rates: RateTables) -> StopSummary:
    total_items = 0
    total_weight = 0
    exceeds = False

    for stop in stops:
        count = stop.item_count or 0
        total_items += count
        bracket = rates.find_weight(stop.weight)
        if bracket is not None:
            total_weight += bracket.min_kg * (stop.item_count or 1)
        if exceeds_weight_limit(stop, rates) or exceeds_size_limit(stop, rates):
            exceeds = True

    return StopSummary(total_items=total_items, total_weight_kg=total_weight, exceeds_limits=exceeds)

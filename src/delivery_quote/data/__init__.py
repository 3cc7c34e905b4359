"""Data subpackage - rate table CSV sheets and their loader."""
from .rate_tables import RateTables, load_rate_tables, get_rate_tables

__all__ = ['RateTables', 'load_rate_tables', 'get_rate_tables']

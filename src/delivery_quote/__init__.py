"""
Delivery Quote Package

Order-draft wizard and pricing engine for on-demand deliveries.
Assembles Send, Errand and Multi-stop orders step by step and prices them
from static rate tables before handing the finished draft off for creation.
"""

__version__ = "1.0.0"

"""Reconciliation handlers for Azure route tables and Service Bus topic authorization rules."""

__version__ = "0.1.0"

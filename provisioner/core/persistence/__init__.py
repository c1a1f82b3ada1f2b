"""Durable stores: state ledger and execution log."""

"""Orchestration core: catalog, ledger, runner, synchronizer, menu driver."""

"""
Domain models: pydantic types for the provisioner.

All models are re-exported here for convenient access:

    from provisioner.core.models import RunConfig, Unit, Receipt, SyncReport
"""

from provisioner.core.models.config import RunConfig
from provisioner.core.models.receipt import Receipt
from provisioner.core.models.sync import SyncOutcome, SyncReport
from provisioner.core.models.unit import (
    PLACEHOLDER_DESCRIPTION,
    Unit,
    make_key,
    split_key,
)

__all__ = [
    "PLACEHOLDER_DESCRIPTION",
    # receipt.py
    "Receipt",
    # config.py
    "RunConfig",
    # sync.py
    "SyncOutcome",
    "SyncReport",
    # unit.py
    "Unit",
    "make_key",
    "split_key",
]

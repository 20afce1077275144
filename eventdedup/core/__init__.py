"""Dedup core: policy table, decision engine, batch coordinator."""

from eventdedup.core.batch import BatchCoordinator
from eventdedup.core.engine import DedupEngine
from eventdedup.core.policy import DedupPolicyTable, load_policy_table

__all__ = [
    "BatchCoordinator",
    "DedupEngine",
    "DedupPolicyTable",
    "load_policy_table",
]

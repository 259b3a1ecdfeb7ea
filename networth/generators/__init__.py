"""Synthetic feed generators."""

from networth.generators.ledger import TransactionFeedGenerator
from networth.generators.rates import RateFeedGenerator

__all__ = ["RateFeedGenerator", "TransactionFeedGenerator"]

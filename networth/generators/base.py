"""Base generator class for synthetic feed generators."""

from __future__ import annotations

import random
from abc import ABC
from datetime import datetime

from faker import Faker


class BaseGenerator(ABC):
    """Base class for all feed generators.

    Provides common initialization: a Faker instance and a private
    random number generator, both seeded for reproducibility.

    Parameters
    ----------
    seed : int | None
        Random seed for reproducibility.
    locale : str
        Faker locale (default ``en_CA``).
    """

    def __init__(
        self,
        seed: int | None = None,
        locale: str = "en_CA",
    ) -> None:
        self.fake = Faker(locale)
        self.rng = random.Random(seed)
        if seed is not None:
            self.fake.seed_instance(seed)


def format_timestamp(moment: datetime) -> str:
    """Format a datetime the way the feeds do (``2021-04-11T23:20:02.155Z``)."""
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"

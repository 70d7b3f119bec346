"""Cohort catalog, order predicates and storage keys."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from hashlib import sha256
from typing import List, Optional

import pandas as pd

from .schemas import CohortFilter

logger = logging.getLogger(__name__)

ALL_COHORTS_KEY = "__all__"

COHORTS: List[CohortFilter] = [
    CohortFilter(id="all", label="All customers"),
    CohortFilter(id="highValue", label="High value", description="Orders >= 500"),
    CohortFilter(id="recurring", label="Package members", description="Customers with package usage"),
    CohortFilter(id="newCustomers", label="New customers", description="First 30 days"),
]

_BY_ID = {cohort.id: cohort for cohort in COHORTS}


def list_cohorts() -> List[CohortFilter]:
    return list(COHORTS)


def resolve_cohort(cohort_id: Optional[str]) -> Optional[CohortFilter]:
    """Map a cohort id to its filter.

    ``"all"``, empty and unknown ids resolve to ``None`` (no filtering).
    """

    if not cohort_id or cohort_id == "all":
        return None
    cohort = _BY_ID.get(cohort_id)
    if cohort is None:
        logger.debug("Unknown cohort id %r, falling back to no filter", cohort_id)
    return cohort


def cohort_key(cohort: Optional[CohortFilter]) -> str:
    """Stable storage partition key derived from the cohort id only."""

    if cohort is None or cohort.id == "all":
        return ALL_COHORTS_KEY
    payload = json.dumps({"id": cohort.id}, sort_keys=True)
    return sha256(payload.encode()).hexdigest()[:16]


@dataclass(frozen=True)
class CohortPredicate:
    """Boolean mask builder over a raw order frame.

    The frame carries ``created_at`` (tz-aware), ``total``, ``uses_package``
    and optionally ``customer_created_at``.
    """

    cohort_id: Optional[str] = None
    high_value_threshold: float = 500.0
    new_customer_days: int = 30
    now: Optional[datetime] = None

    @property
    def is_passthrough(self) -> bool:
        return self.cohort_id not in {"highValue", "recurring", "newCustomers"}

    def mask(self, frame: pd.DataFrame) -> pd.Series:
        if frame.empty or self.is_passthrough:
            return pd.Series(True, index=frame.index)
        if self.cohort_id == "highValue":
            return frame["total"].astype(float) >= self.high_value_threshold
        if self.cohort_id == "recurring":
            return frame["uses_package"].fillna(False).astype(bool)
        return self._new_customer_mask(frame)

    def _new_customer_mask(self, frame: pd.DataFrame) -> pd.Series:
        window = pd.Timedelta(days=self.new_customer_days)
        created = frame["created_at"]
        if "customer_created_at" in frame.columns:
            joined = pd.to_datetime(frame["customer_created_at"], utc=True)
            known = joined.notna()
            if known.any():
                delta = created - joined
                by_account = (delta >= pd.Timedelta(0)) & (delta <= window)
                return by_account.where(known, self._recent_mask(created)).astype(bool)
        return self._recent_mask(created)

    def _recent_mask(self, created: pd.Series) -> pd.Series:
        if self.now is None:
            raise ValueError("newCustomers cohort requires a reference time")
        cutoff = pd.Timestamp(self.now - timedelta(days=self.new_customer_days))
        if cutoff.tzinfo is None:
            cutoff = cutoff.tz_localize("UTC")
        return created >= cutoff


def cohort_predicate(
    cohort: Optional[CohortFilter],
    *,
    high_value_threshold: float = 500.0,
    new_customer_days: int = 30,
    now: Optional[datetime] = None,
) -> CohortPredicate:
    return CohortPredicate(
        cohort_id=cohort.id if cohort is not None else None,
        high_value_threshold=high_value_threshold,
        new_customer_days=new_customer_days,
        now=now,
    )


__all__ = [
    "ALL_COHORTS_KEY",
    "COHORTS",
    "CohortPredicate",
    "cohort_key",
    "cohort_predicate",
    "list_cohorts",
    "resolve_cohort",
]

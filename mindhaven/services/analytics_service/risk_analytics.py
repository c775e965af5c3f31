"""Per-day risk analytics counters.

Each classified interaction increments exactly one counter in the
bucket for the current UTC day. Counters are never decremented and past
buckets are never rewritten.
"""
import logging
from typing import Callable, Optional

from mindhaven.shared.database import KVStore, keys
from mindhaven.shared.models import RiskAnalytics, RiskLevel
from mindhaven.shared.utils import day_key, hash_user_id

logger = logging.getLogger(__name__)


class RiskAnalyticsAggregator:
    """Maintains risk_analytics:<day> buckets in the KV store."""

    def __init__(self, store: KVStore, today: Callable[[], str] = day_key):
        self.store = store
        self._today = today

    def record(self, user_id: str, risk_level: RiskLevel) -> RiskAnalytics:
        """Increment the counter for risk_level in today's bucket.

        Args:
            user_id: User whose interaction was classified (logged hashed)
            risk_level: Classified level

        Returns:
            The updated bucket
        """
        key = keys.risk_analytics(self._today())
        analytics = RiskAnalytics.from_dict(self.store.get(key))
        analytics.increment(risk_level)
        self.store.set(key, analytics.to_dict())

        logger.info(
            "RISK_ANALYTICS_UPDATED",
            extra={
                "user_id_hash": hash_user_id(user_id),
                "risk_level": risk_level.value,
                "bucket": key,
                "bucket_total": analytics.total,
            }
        )
        return analytics

    def get_day(self, day: Optional[str] = None) -> RiskAnalytics:
        """Counters for day (default today); all zero when no bucket exists."""
        return RiskAnalytics.from_dict(self.store.get(keys.risk_analytics(day or self._today())))

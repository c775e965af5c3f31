"""Analytics Service: risk counters and the admin dashboard summary.

- risk_analytics.py: per-day counters of classified interactions
- dashboard.py: user, activity and risk distribution aggregates
"""

from .risk_analytics import RiskAnalyticsAggregator
from .dashboard import AdminDashboard

__all__ = [
    "RiskAnalyticsAggregator",
    "AdminDashboard",
]

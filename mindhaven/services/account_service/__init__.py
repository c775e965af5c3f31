"""Account Service: signup, profiles, usage stats and activity logs.

- accounts.py: AccountManager (KV-backed profile/stats/activity records)
- auth_provider.py: Supabase Auth admin client and bearer-token check
"""

from .accounts import AccountManager, ACTIVITY_COUNTERS
from .auth_provider import AuthProvider, AuthUser, SupabaseAuthProvider, validate_bearer_token

__all__ = [
    "AccountManager",
    "ACTIVITY_COUNTERS",
    "AuthProvider",
    "AuthUser",
    "SupabaseAuthProvider",
    "validate_bearer_token",
]

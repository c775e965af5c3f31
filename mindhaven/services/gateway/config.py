"""API gateway configuration.

Loaded from environment variables at startup; Supabase and Postgres
credentials can instead come from AWS Secrets Manager.
"""
import os
from dataclasses import dataclass, replace
from typing import Optional

from mindhaven.shared.utils.secrets import load_json_secret

DEV_HASH_SALT = "default_dev_salt_change_in_production_32chars"


@dataclass(frozen=True)
class AppConfig:
    """Runtime settings for the HTTP API."""
    route_prefix: str = "/api"
    supabase_url: Optional[str] = None
    supabase_service_role_key: Optional[str] = None
    kv_backend: str = "memory"          # memory | postgres
    pii_hash_salt: str = DEV_HASH_SALT
    post_index_limit: int = 1000
    default_page_size: int = 20
    max_page_size: int = 100
    cors_origins: str = "*"
    auth_timeout_seconds: float = 10.0
    db_secret_arn: Optional[str] = None
    aws_region: str = "us-east-1"

    @property
    def has_auth_credentials(self) -> bool:
        return bool(self.supabase_url and self.supabase_service_role_key)

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Create config from environment variables.

        Environment variables:
            ROUTE_PREFIX: Path prefix for every endpoint (default /api)
            SUPABASE_URL: Supabase project URL
            SUPABASE_SERVICE_ROLE_KEY: Service-role key for the admin API
            KV_BACKEND: memory or postgres (default memory)
            PII_HASH_SALT: Salt for hashed identifiers in logs
            POST_INDEX_LIMIT: Max ids kept in the global post index (default 1000)
            DEFAULT_PAGE_SIZE: Default forum page size (default 20)
            MAX_PAGE_SIZE: Largest accepted forum page size (default 100)
            CORS_ORIGINS: Allowed CORS origins (default *)
            AUTH_TIMEOUT_SECONDS: Auth provider request timeout (default 10)
            DB_SECRET_ARN: Secrets Manager ARN holding the Postgres credentials
            AWS_REGION: Region for Secrets Manager lookups (default us-east-1)
        """
        return cls(
            route_prefix=os.getenv("ROUTE_PREFIX", "/api").rstrip("/"),
            supabase_url=os.getenv("SUPABASE_URL") or None,
            supabase_service_role_key=os.getenv("SUPABASE_SERVICE_ROLE_KEY") or None,
            kv_backend=os.getenv("KV_BACKEND", "memory").lower(),
            pii_hash_salt=os.getenv("PII_HASH_SALT", DEV_HASH_SALT),
            post_index_limit=int(os.getenv("POST_INDEX_LIMIT", "1000")),
            default_page_size=int(os.getenv("DEFAULT_PAGE_SIZE", "20")),
            max_page_size=int(os.getenv("MAX_PAGE_SIZE", "100")),
            cors_origins=os.getenv("CORS_ORIGINS", "*"),
            auth_timeout_seconds=float(os.getenv("AUTH_TIMEOUT_SECONDS", "10")),
            db_secret_arn=os.getenv("DB_SECRET_ARN") or None,
            aws_region=os.getenv("AWS_REGION", "us-east-1"),
        )

    def with_secrets(self, secret_arn: str, region: str = "us-east-1") -> "AppConfig":
        """Overlay Supabase credentials stored in AWS Secrets Manager.

        The secret is a JSON object with "supabase_url" and
        "service_role_key" (either may be omitted to keep the current value).
        """
        secret = load_json_secret(secret_arn, region)
        return replace(
            self,
            supabase_url=secret.get("supabase_url", self.supabase_url),
            supabase_service_role_key=secret.get("service_role_key", self.supabase_service_role_key),
        )

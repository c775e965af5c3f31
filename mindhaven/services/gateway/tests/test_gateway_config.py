"""Tests for API gateway configuration."""
import json
from unittest.mock import patch

from mindhaven.services.gateway import AppConfig
from mindhaven.services.gateway.config import DEV_HASH_SALT

ENV_VARS = (
    "ROUTE_PREFIX",
    "SUPABASE_URL",
    "SUPABASE_SERVICE_ROLE_KEY",
    "KV_BACKEND",
    "PII_HASH_SALT",
    "POST_INDEX_LIMIT",
    "DEFAULT_PAGE_SIZE",
    "MAX_PAGE_SIZE",
    "CORS_ORIGINS",
    "AUTH_TIMEOUT_SECONDS",
    "DB_SECRET_ARN",
    "AWS_REGION",
)


class TestAppConfig:
    def test_defaults(self, monkeypatch):
        for name in ENV_VARS:
            monkeypatch.delenv(name, raising=False)

        config = AppConfig.from_env()

        assert config.route_prefix == "/api"
        assert config.kv_backend == "memory"
        assert config.pii_hash_salt == DEV_HASH_SALT
        assert config.post_index_limit == 1000
        assert config.default_page_size == 20
        assert config.has_auth_credentials is False
        assert config.db_secret_arn is None
        assert config.aws_region == "us-east-1"

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("ROUTE_PREFIX", "/functions/v1/server/")
        monkeypatch.setenv("SUPABASE_URL", "https://project.supabase.co")
        monkeypatch.setenv("SUPABASE_SERVICE_ROLE_KEY", "key")
        monkeypatch.setenv("KV_BACKEND", "POSTGRES")
        monkeypatch.setenv("MAX_PAGE_SIZE", "50")
        monkeypatch.setenv("DB_SECRET_ARN", "arn:aws:secretsmanager:db")
        monkeypatch.setenv("AWS_REGION", "eu-west-1")

        config = AppConfig.from_env()

        assert config.route_prefix == "/functions/v1/server"
        assert config.kv_backend == "postgres"
        assert config.max_page_size == 50
        assert config.has_auth_credentials is True
        assert config.db_secret_arn == "arn:aws:secretsmanager:db"
        assert config.aws_region == "eu-west-1"

    @patch("mindhaven.shared.utils.secrets.boto3")
    def test_with_secrets(self, mock_boto3):
        mock_boto3.client.return_value.get_secret_value.return_value = {
            "SecretString": json.dumps({
                "supabase_url": "https://secret.supabase.co",
                "service_role_key": "secret-key",
            })
        }

        config = AppConfig(kv_backend="postgres").with_secrets("arn:aws:secretsmanager:x", "eu-west-1")

        assert config.supabase_url == "https://secret.supabase.co"
        assert config.supabase_service_role_key == "secret-key"
        assert config.kv_backend == "postgres"
        mock_boto3.client.assert_called_once_with("secretsmanager", region_name="eu-west-1")

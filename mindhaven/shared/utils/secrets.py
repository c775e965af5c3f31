"""AWS Secrets Manager access for service credentials."""
import json
import logging
from typing import Any, Dict

import boto3

logger = logging.getLogger(__name__)


def load_json_secret(secret_arn: str, region: str = "us-east-1") -> Dict[str, Any]:
    """Fetch a secret whose value is a JSON object.

    Raises:
        Whatever boto3 raises; the failure is logged first
    """
    try:
        client = boto3.client("secretsmanager", region_name=region)
        response = client.get_secret_value(SecretId=secret_arn)
        secret = json.loads(response["SecretString"])
    except Exception as e:
        logger.error(
            "SECRET_LOAD_FAILED",
            extra={"secret_arn": secret_arn, "region": region, "error_type": type(e).__name__}
        )
        raise

    logger.info("SECRET_LOADED", extra={"secret_arn": secret_arn, "fields": sorted(secret)})
    return secret

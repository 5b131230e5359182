import json
import logging
from typing import Any, Dict, Optional

import boto3


logger = logging.getLogger(__name__)


class AwsSecretsManagerProvider:
    """Resolves named credential blobs stored as JSON strings in AWS Secrets Manager."""

    def __init__(self, region: str, client: Optional[Any] = None) -> None:
        self.region = region
        self._client = client

    def _get_client(self):
        """Return the Secrets Manager client, creating it on first call."""
        if self._client is None:
            self._client = boto3.client("secretsmanager", region_name=self.region)
        return self._client

    def get_secret(self, name: str) -> Dict[str, Any]:
        response = self._get_client().get_secret_value(SecretId=name)
        logger.debug("Secret %s resolved", name)
        return json.loads(response["SecretString"])

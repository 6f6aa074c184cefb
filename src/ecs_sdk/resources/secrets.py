"""
Secrets Manager operations.
"""

import logging
import threading
from typing import Any, Dict, List, Optional

from ..polling import raise_if_cancelled
from ..types import Secret

logger = logging.getLogger(__name__)


def _secret_from_api(data: Dict[str, Any]) -> Secret:
    labels = {tag["Key"]: tag["Value"] for tag in data.get("Tags", [])}
    return Secret(
        id=data["ARN"],
        name=data["Name"],
        description=data.get("Description", ""),
        labels=labels,
    )


class SecretsMixin:
    """Secrets Manager calls. Expects ``self.secretsmanager`` to be a client."""

    def create_secret(self, secret: Secret, cancel: Optional[threading.Event] = None) -> str:
        """Create a secret and return its ARN."""
        logger.debug(f"Create secret {secret.name}")
        params: Dict[str, Any] = {
            "Name": secret.name,
            "SecretString": secret.get_cred_string(),
            "Description": secret.description,
        }
        if secret.labels:
            params["Tags"] = [{"Key": k, "Value": v} for k, v in secret.labels.items()]

        raise_if_cancelled(cancel, f"Creating secret {secret.name}")
        response = self.secretsmanager.create_secret(**params)
        return str(response["ARN"])

    def inspect_secret(self, secret_id: str, cancel: Optional[threading.Event] = None) -> Secret:
        """Describe a secret by name or ARN."""
        logger.debug(f"Inspect secret {secret_id}")
        raise_if_cancelled(cancel, f"Describing secret {secret_id}")
        response = self.secretsmanager.describe_secret(SecretId=secret_id)
        return _secret_from_api(response)

    def list_secrets(self, cancel: Optional[threading.Event] = None) -> List[Secret]:
        """List all secrets of the account."""
        logger.debug("List secrets")
        secrets = []
        paginator = self.secretsmanager.get_paginator("list_secrets")
        for page in paginator.paginate():
            raise_if_cancelled(cancel, "Listing secrets")
            secrets.extend(_secret_from_api(s) for s in page.get("SecretList", []))
        return secrets

    def delete_secret(
        self, secret_id: str, recover: bool = False, cancel: Optional[threading.Event] = None
    ) -> None:
        """
        Delete a secret.

        Args:
            secret_id: Secret name or ARN
            recover: Keep the secret recoverable during the recovery window
                instead of deleting it immediately
        """
        logger.debug(f"Delete secret {secret_id}")
        raise_if_cancelled(cancel, f"Deleting secret {secret_id}")
        self.secretsmanager.delete_secret(
            SecretId=secret_id, ForceDeleteWithoutRecovery=not recover
        )

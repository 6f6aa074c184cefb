"""
IAM role lookups.
"""

import threading
from typing import Optional

from ..polling import raise_if_cancelled


class IamMixin:
    """IAM calls. Expects ``self.iam`` to be an IAM client."""

    def get_role_arn(self, name: str, cancel: Optional[threading.Event] = None) -> str:
        """Get the ARN of a role."""
        raise_if_cancelled(cancel, f"Getting role {name}")
        response = self.iam.get_role(RoleName=name)
        return str(response["Role"]["Arn"])

import logging
from typing import Any, Optional

import boto3

from projection_loader.domain.exceptions import NotificationError
from projection_loader.infrastructure.config import EmailConfig
from projection_loader.services.report_service import ReportService


logger = logging.getLogger(__name__)


class NotificationService:
    """Sends the run summary through AWS SES."""

    def __init__(self, config: EmailConfig, reporter: ReportService, client: Optional[Any] = None) -> None:
        self.config = config
        self.reporter = reporter
        self._client = client

    def _get_client(self):
        if self._client is None:
            self._client = boto3.client("ses", region_name=self.config.region)
        return self._client

    def send(self, body: str, is_success: bool, is_html: bool = True) -> None:
        """
        Wrap the body in the e-mail template and send it.

        Args:
            body (str): Report tables or the failure message
            is_success (bool): Selects the success or failure subject
            is_html (bool): Send as HTML or as plain text body

        Raises:
            NotificationError: if SES rejects the message or cannot be reached
        """
        subject = self.config.success_subject if is_success else self.config.failure_subject
        message = self.reporter.render_email(body)

        try:
            self._get_client().send_email(
                Source=self.config.sender,
                Destination={"ToAddresses": list(self.config.recipients)},
                Message={
                    "Subject": {"Data": subject},
                    "Body": {("Html" if is_html else "Text"): {"Data": message}},
                },
            )
        except Exception as exc:
            logger.error("Error sending e-mail: %s", exc)
            raise NotificationError(f"Error sending e-mail: {exc}") from exc

        logger.info("E-mail sent to %s: %s", ", ".join(self.config.recipients), subject)

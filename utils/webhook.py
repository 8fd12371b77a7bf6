# utils/webhook.py
import logging
import os

import requests

logger = logging.getLogger(__name__)

WEBHOOK_URL = os.getenv("RECEIPT_WEBHOOK_URL")


class WebhookDeliveryError(Exception):
     """The webhook endpoint did not accept an event."""


def post_event(event: dict, url: str, timeout: int = 10) -> None:
     """POST one registry event as JSON."""
     response = requests.post(
          url,
          headers={"Content-Type": "application/json"},
          json=event,
          timeout=timeout,
     )
     if response.status_code not in (200, 201, 202, 204):
          raise WebhookDeliveryError(
               f"Webhook error {response.status_code} for event #{event.get('sequence')}: {response.text}"
          )


def make_webhook_observer(url: str):
     """Event bus observer that forwards every committed event to ``url``."""
     def observer(event: dict) -> None:
          post_event(event, url)
          logger.debug("Delivered event #%s to %s", event.get("sequence"), url)

     return observer

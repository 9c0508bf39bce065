"""Delivery of queued mail requests and their bus subscription."""

from __future__ import annotations

import logging

from .models import MailSendRequest

MAIL_SEND_TOPIC = "mail.send"

log = logging.getLogger(__name__)


class MailService:
    """Sends mail requests through a sender, logging rather than raising failures."""

    def __init__(self, sender):
        self._sender = sender

    def send(self, request: MailSendRequest):
        log.info("Receiving mail.send message: %s", request.to)
        try:
            self._sender.send_with_template(
                request.to, request.subject, request.template, request.data
            )
        except Exception as exc:
            log.error("Failed to send email: %s", exc)


def register_mail_listener(bus, service):
    """Subscribe *service* to mail requests published on *bus*; return the reference."""
    return bus.subscribe_async(MAIL_SEND_TOPIC, service.send, False)
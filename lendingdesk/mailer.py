"""Sending HTML e-mail rendered from templates over SMTP."""

from __future__ import annotations

import smtplib
import ssl
from email.message import EmailMessage

from .config import MailConfig
from .templates import TemplateRenderer

_IMPLICIT_TLS_PORT = 465


class MailSender:
    """Renders a template and delivers it through the configured SMTP server."""

    def __init__(self, config: MailConfig, renderer=None):
        self.config = config
        self._renderer = renderer

    def _tls_context(self):
        context = ssl.create_default_context()
        if self.config.tls:
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE
        return context

    def _message(self, to, subject, body):
        message = EmailMessage()
        message["From"] = self.config.username
        message["To"] = to
        message["Subject"] = subject
        message.set_content(body, subtype="html")
        return message

    def send_with_template(self, to, subject, template, data):
        """Render *template* with *data* and mail it to *to*.

        Template and SMTP failures propagate to the caller.
        """
        renderer = self._renderer if self._renderer is not None else TemplateRenderer()
        body = renderer.render(template, data)
        message = self._message(to, subject, body)

        context = self._tls_context()
        host, port = self.config.host, self.config.port
        if port == _IMPLICIT_TLS_PORT:
            smtp = smtplib.SMTP_SSL(host, port, context=context)
        else:
            smtp = smtplib.SMTP(host, port)
        try:
            smtp.ehlo()
            if port != _IMPLICIT_TLS_PORT and smtp.has_extn("starttls"):
                smtp.starttls(context=context)
                smtp.ehlo()
            if self.config.username:
                smtp.login(self.config.username, self.config.password)
            smtp.send_message(message)
        finally:
            smtp.quit()
"""Infrastructure implementations of application service interfaces."""

from app.infrastructure.services.email_template_renderer import EmailTemplateRenderer
from app.infrastructure.services.mail_transport import (
    LogOnlyMailTransport,
    SendGridMailTransport,
    build_mail_transport,
)

__all__ = [
    "EmailTemplateRenderer",
    "LogOnlyMailTransport",
    "SendGridMailTransport",
    "build_mail_transport",
]

"""Application interfaces (ports): repository and service protocols.

Define contracts for infrastructure implementations (DIP).
No runtime imports from app.infrastructure or app.api.
"""

from app.application.interfaces.repositories import (
    IAuditLogRepository,
    ITaskRepository,
    IUserRepository,
)
from app.application.interfaces.services import (
    IAuditLogger,
    IConnectionRegistry,
    IEmailTemplateRenderer,
    IMailTransport,
    INotificationEmitter,
    IRecurringTaskGenerator,
)

__all__ = [
    "IAuditLogRepository",
    "IAuditLogger",
    "IConnectionRegistry",
    "IEmailTemplateRenderer",
    "IMailTransport",
    "INotificationEmitter",
    "IRecurringTaskGenerator",
    "ITaskRepository",
    "IUserRepository",
]

from compass.models.domain import (
    Alternative,
    AuditLog,
    Criterion,
    Decision,
    Option,
    OptionScore,
    OutcomeRule,
    Rating,
    User,
)

__all__ = [
    "Alternative",
    "AuditLog",
    "Criterion",
    "Decision",
    "Option",
    "OptionScore",
    "OutcomeRule",
    "Rating",
    "User",
]

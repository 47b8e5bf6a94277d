"""Import every ORM model so Base.metadata knows all tables.

Used by Alembic autogeneration and by test fixtures that create the
schema directly.
"""

from quotewise.core.database import Base
from quotewise.modules.clients.models import Client
from quotewise.modules.companies.models import Company
from quotewise.modules.industries.models import Industry
from quotewise.modules.prompts.models import SystemPrompt
from quotewise.modules.quotes.models import Quote
from quotewise.modules.training.models import TrainingExample
from quotewise.modules.users.models import RefreshToken, User


__all__ = [
    "Base",
    "Client",
    "Company",
    "Industry",
    "Quote",
    "RefreshToken",
    "SystemPrompt",
    "TrainingExample",
    "User",
]

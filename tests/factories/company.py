"""Company, industry and client factories for tests."""

from uuid import uuid4

from polyfactory.factories.sqlalchemy_factory import SQLAlchemyFactory

from quotewise.modules.clients.models import Client
from quotewise.modules.companies.models import Company
from quotewise.modules.industries.models import Industry


class IndustryFactory(SQLAlchemyFactory[Industry]):
    """Factory for generating Industry rows."""

    __model__ = Industry

    @classmethod
    def name(cls) -> str:
        return f"Industry {uuid4().hex[:6]}"

    @classmethod
    def description(cls):
        return None

    @classmethod
    def icon(cls):
        return None

    @classmethod
    def is_active(cls) -> bool:
        return True


class CompanyFactory(SQLAlchemyFactory[Company]):
    """Factory for generating Company rows."""

    __model__ = Company

    @classmethod
    def name(cls) -> str:
        """Generate a company name."""
        return f"{cls.__faker__.company()} {uuid4().hex[:4]}"

    @classmethod
    def logo(cls):
        return None

    @classmethod
    def industry_id(cls):
        return None

    @classmethod
    def is_active(cls) -> bool:
        return True


class ClientFactory(SQLAlchemyFactory[Client]):
    """Factory for generating Client rows. Pass ``company_id`` and ``user_id``."""

    __model__ = Client

    @classmethod
    def company_name(cls) -> str:
        return f"{cls.__faker__.company()} {uuid4().hex[:4]}"

    @classmethod
    def contact_first_name(cls) -> str:
        return cls.__faker__.first_name()

    @classmethod
    def contact_last_name(cls) -> str:
        return cls.__faker__.last_name()

    @classmethod
    def email(cls) -> str:
        return f"client-{uuid4().hex[:8]}@example.com"

    @classmethod
    def phone(cls) -> str:
        return "555-0100"

    @classmethod
    def address(cls):
        return None

    @classmethod
    def notes(cls):
        return None

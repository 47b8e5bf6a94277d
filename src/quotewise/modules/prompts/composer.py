"""Hierarchical prompt composition.

A conversation sent to the completion provider is assembled from up to
four system layers, the earlier turns of the conversation and finally the
user's message::

    [core?, industry?, client?, examples?, history..., user]

Later layers refine earlier ones: the industry prompt narrows the core
prompt and the client context narrows the industry prompt. The examples
layer shows the company's best rated training examples. Missing layers
are skipped; only a missing core prompt is worth a warning.
"""

from collections.abc import Sequence
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from quotewise.core.constants import (
    CLIENT_CONTEXT_PREFIX,
    CLIENT_CONTEXT_QUOTE_LIMIT,
    TRAINING_EXAMPLE_LIMIT,
    TRAINING_EXAMPLES_PREFIX,
)
from quotewise.modules.clients.models import Client
from quotewise.modules.clients.repos import ClientRepository
from quotewise.modules.companies.repos import CompanyRepository
from quotewise.modules.prompts.repos import SystemPromptRepository
from quotewise.modules.prompts.schemas import (
    ChatTurn,
    ComposedMessage,
    MessageRole,
    PromptLayer,
)
from quotewise.modules.quotes.models import Quote
from quotewise.modules.quotes.repos import QuoteRepository
from quotewise.modules.training.models import TrainingExample
from quotewise.modules.training.repos import TrainingExampleRepository


logger = structlog.get_logger()


def format_amount(amount: int) -> str:
    """Render an amount in minor units as ``$1,234.50``."""
    return f"${amount / 100:,.2f}"


def build_client_context(client: Client, quotes: list[Quote]) -> str:
    """Render a client's profile and recent quotes as free text.

    Args:
        client: The client record
        quotes: Recent quotes of the client, newest first. Only the first
            few are rendered.

    Returns:
        Multi-line context block without the layer prefix
    """
    lines = [
        "CLIENT INFORMATION:",
        f"Name: {client.company_name}",
        f"Contact: {client.contact_name or 'Not provided'}",
        f"Email: {client.email or 'Not provided'}",
        f"Phone: {client.phone or 'Not provided'}",
    ]
    if quotes:
        lines += ["", "RECENT QUOTES:"]
        for quote in quotes[:CLIENT_CONTEXT_QUOTE_LIMIT]:
            description = quote.description or "No description"
            lines.append(f"- {quote.quote_number}: {description} ({format_amount(quote.amount)})")
    if client.notes:
        lines += ["", "NOTES:", client.notes]
    return "\n".join(lines)


def build_examples_context(examples: list[TrainingExample]) -> str:
    """Render training examples as numbered request and answer pairs."""
    blocks = [
        f"EXAMPLE {n}\nRequest: {example.prompt}\nAnswer: {example.response}"
        for n, example in enumerate(examples, start=1)
    ]
    return "\n\n".join(blocks)


class PromptComposer:
    """Assembles role-tagged messages from the prompt hierarchy.

    The composer only reads; it never talks to a completion provider.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.prompts = SystemPromptRepository(db)
        self.companies = CompanyRepository(db)
        self.clients = ClientRepository(db)
        self.quotes = QuoteRepository(db)
        self.training = TrainingExampleRepository(db)

    async def compose(
        self,
        company_id: UUID | None,
        user_message: str,
        client_id: UUID | None = None,
        history: Sequence[ChatTurn] = (),
    ) -> list[ComposedMessage]:
        """Build the message list for one completion request.

        Args:
            company_id: The caller's company; selects the industry and
                examples layers
            user_message: The live user message, always last
            client_id: Optional client of that company to add context for
            history: Earlier turns of the conversation, oldest first

        Returns:
            Messages ordered core, industry, client context, examples,
            history, user
        """
        messages: list[ComposedMessage] = []

        core = await self.prompts.get_core()
        if core:
            messages.append(self._system(core.content, PromptLayer.CORE))
        else:
            logger.warning("core_prompt_missing", company_id=str(company_id))

        industry_text = await self._industry_layer(company_id)
        if industry_text:
            messages.append(self._system(industry_text, PromptLayer.INDUSTRY))

        client_text = await self._client_layer(company_id, client_id)
        if client_text:
            messages.append(self._system(CLIENT_CONTEXT_PREFIX + client_text, PromptLayer.CLIENT))

        examples_text = await self._examples_layer(company_id)
        if examples_text:
            messages.append(
                self._system(TRAINING_EXAMPLES_PREFIX + examples_text, PromptLayer.EXAMPLES)
            )

        messages.extend(
            ComposedMessage(role=turn.role, content=turn.content, layer=PromptLayer.HISTORY)
            for turn in history
        )

        messages.append(
            ComposedMessage(role=MessageRole.USER, content=user_message, layer=PromptLayer.USER)
        )
        logger.debug(
            "prompt_composed",
            company_id=str(company_id),
            layers=[m.layer.value for m in messages],
        )
        return messages

    async def _industry_layer(self, company_id: UUID | None) -> str | None:
        if company_id is None:
            return None
        company = await self.companies.get_by_id(company_id)
        if not company or company.industry_id is None:
            logger.debug("industry_layer_skipped", company_id=str(company_id))
            return None
        prompt = await self.prompts.get_active_industry(company.industry_id)
        if not prompt:
            logger.debug("industry_prompt_missing", industry_id=str(company.industry_id))
            return None
        return prompt.content

    async def _client_layer(self, company_id: UUID | None, client_id: UUID | None) -> str | None:
        if company_id is None or client_id is None:
            return None
        client = await self.clients.get_by_id(client_id, company_id)
        if not client:
            logger.debug("client_layer_skipped", client_id=str(client_id))
            return None
        quotes = await self.quotes.recent_for_client(
            client.id, company_id, limit=CLIENT_CONTEXT_QUOTE_LIMIT
        )
        return build_client_context(client, quotes)

    async def _examples_layer(self, company_id: UUID | None) -> str | None:
        if company_id is None:
            return None
        examples = await self.training.best_for_company(company_id, TRAINING_EXAMPLE_LIMIT)
        if not examples:
            return None
        return build_examples_context(examples)

    @staticmethod
    def _system(content: str, layer: PromptLayer) -> ComposedMessage:
        return ComposedMessage(role=MessageRole.SYSTEM, content=content, layer=layer)

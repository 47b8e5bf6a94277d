"""Integration tests for hierarchical prompt composition."""

from datetime import timedelta

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from quotewise.core.constants import CLIENT_CONTEXT_PREFIX, TRAINING_EXAMPLES_PREFIX
from quotewise.core.utils.time import utcnow
from quotewise.modules.clients.models import Client
from quotewise.modules.companies.models import Company
from quotewise.modules.industries.models import Industry
from quotewise.modules.prompts.composer import PromptComposer
from quotewise.modules.prompts.models import PromptType, SystemPrompt
from quotewise.modules.prompts.schemas import ChatTurn, MessageRole, PromptLayer
from quotewise.modules.quotes.models import Quote
from quotewise.modules.training.models import TrainingExample
from quotewise.modules.users.models import User
from tests.factories.company import ClientFactory


pytestmark = pytest.mark.integration

CORE_TEXT = "You are a quoting assistant. Be accurate."
INDUSTRY_TEXT = "Use construction terminology and mention permits."


async def add_prompt(db: AsyncSession, **values) -> SystemPrompt:
    values.setdefault("name", values["prompt_type"].title())
    values.setdefault("is_active", True)
    prompt = SystemPrompt(**values)
    db.add(prompt)
    await db.commit()
    return prompt


@pytest.fixture
async def core_prompt(db: AsyncSession) -> SystemPrompt:
    return await add_prompt(db, prompt_type=PromptType.CORE.value, content=CORE_TEXT)


@pytest.fixture
async def industry_prompt(db: AsyncSession, industry: Industry) -> SystemPrompt:
    return await add_prompt(
        db,
        prompt_type=PromptType.INDUSTRY.value,
        content=INDUSTRY_TEXT,
        industry_id=industry.id,
    )


@pytest.fixture
async def acme_client(db: AsyncSession, company: Company, user: User) -> Client:
    client = ClientFactory.build(
        company_name="Harbor Homes",
        contact_first_name="Dana",
        contact_last_name="Reyes",
        email="dana@harbor.example",
        phone="555-0199",
        notes="Prefers weekday site visits.",
        company_id=company.id,
        user_id=user.id,
    )
    db.add(client)
    await db.commit()
    return client


async def add_quotes(db: AsyncSession, client: Client, user: User, count: int) -> list[Quote]:
    start = utcnow() - timedelta(days=count)
    quotes = [
        Quote(
            quote_number=f"Q-{n:03d}",
            client_id=client.id,
            client_name=client.company_name,
            description=f"Job {n}",
            amount=100_000 + n,
            date=start + timedelta(days=n),
            status="draft",
            user_id=user.id,
            company_id=client.company_id,
        )
        for n in range(count)
    ]
    db.add_all(quotes)
    await db.commit()
    return quotes


@pytest.fixture
def composer(db: AsyncSession) -> PromptComposer:
    return PromptComposer(db)


class TestCompose:
    """Layer ordering and skipping."""

    async def test_all_layers_in_order(
        self,
        composer: PromptComposer,
        db: AsyncSession,
        company: Company,
        user: User,
        core_prompt,
        industry_prompt,
        acme_client: Client,
    ):
        await add_quotes(db, acme_client, user, 2)

        messages = await composer.compose(company.id, "Quote a deck", client_id=acme_client.id)

        assert [m.layer for m in messages] == [
            PromptLayer.CORE,
            PromptLayer.INDUSTRY,
            PromptLayer.CLIENT,
            PromptLayer.USER,
        ]
        assert [m.role for m in messages] == [MessageRole.SYSTEM] * 3 + [MessageRole.USER]
        assert messages[0].content == CORE_TEXT
        assert messages[1].content == INDUSTRY_TEXT
        assert messages[2].content.startswith(CLIENT_CONTEXT_PREFIX + "CLIENT INFORMATION:")
        assert "Name: Harbor Homes" in messages[2].content
        assert "- Q-001: Job 1 ($1,000.01)" in messages[2].content
        assert "NOTES:\nPrefers weekday site visits." in messages[2].content
        assert messages[3].content == "Quote a deck"

    async def test_core_only(self, composer: PromptComposer, other_company: Company, core_prompt):
        messages = await composer.compose(other_company.id, "Hello")

        assert [m.layer for m in messages] == [PromptLayer.CORE, PromptLayer.USER]

    async def test_without_core(self, composer: PromptComposer, other_company: Company):
        messages = await composer.compose(other_company.id, "Hello")

        assert [(m.role, m.content) for m in messages] == [(MessageRole.USER, "Hello")]

    async def test_without_company(self, composer: PromptComposer, core_prompt):
        messages = await composer.compose(None, "Hello")

        assert [m.layer for m in messages] == [PromptLayer.CORE, PromptLayer.USER]

    async def test_inactive_prompts_are_skipped(
        self, composer: PromptComposer, db: AsyncSession, company: Company, industry: Industry
    ):
        await add_prompt(db, prompt_type="core", content=CORE_TEXT, is_active=False)
        await add_prompt(
            db, prompt_type="industry", content=INDUSTRY_TEXT, industry_id=industry.id,
            is_active=False,
        )

        messages = await composer.compose(company.id, "Hello")

        assert [m.layer for m in messages] == [PromptLayer.USER]

    async def test_other_industry_prompt_is_ignored(
        self, composer: PromptComposer, other_company: Company, core_prompt, industry_prompt
    ):
        messages = await composer.compose(other_company.id, "Hello")

        assert PromptLayer.INDUSTRY not in [m.layer for m in messages]

    async def test_foreign_client_is_ignored(
        self,
        composer: PromptComposer,
        other_company: Company,
        core_prompt,
        acme_client: Client,
    ):
        messages = await composer.compose(other_company.id, "Hello", client_id=acme_client.id)

        assert [m.layer for m in messages] == [PromptLayer.CORE, PromptLayer.USER]

    async def test_client_context_lists_five_newest_quotes(
        self,
        composer: PromptComposer,
        db: AsyncSession,
        company: Company,
        user: User,
        acme_client: Client,
    ):
        await add_quotes(db, acme_client, user, 7)

        messages = await composer.compose(company.id, "Hello", client_id=acme_client.id)

        context = messages[0].content
        listed = [line.split(":")[0] for line in context.splitlines() if line.startswith("- Q-")]
        assert listed == ["- Q-006", "- Q-005", "- Q-004", "- Q-003", "- Q-002"]


def example(company: Company, job: str, quality: int | None = None) -> TrainingExample:
    return TrainingExample(
        prompt=f"{job}?",
        response=f"{job} answer",
        quality=quality,
        company_id=company.id,
    )


class TestExamplesAndHistory:
    """Training examples and earlier turns sit between the context and the message."""

    async def test_best_rated_examples_of_own_company(
        self,
        composer: PromptComposer,
        db: AsyncSession,
        company: Company,
        other_company: Company,
        core_prompt,
    ):
        db.add_all(
            [
                example(company, "Fence", quality=3),
                example(company, "Deck", quality=5),
                example(company, "Shed"),
                example(company, "Roof", quality=4),
                example(other_company, "Pool", quality=5),
            ]
        )
        await db.commit()

        messages = await composer.compose(company.id, "Quote a patio")

        assert [m.layer for m in messages] == [
            PromptLayer.CORE,
            PromptLayer.EXAMPLES,
            PromptLayer.USER,
        ]
        examples = messages[1]
        assert examples.role == MessageRole.SYSTEM
        assert examples.content.startswith(TRAINING_EXAMPLES_PREFIX + "EXAMPLE 1\nRequest: Deck?")
        assert examples.content.index("Deck answer") < examples.content.index("Roof answer")
        assert examples.content.index("Roof answer") < examples.content.index("Fence answer")
        assert "Shed" not in examples.content
        assert "Pool" not in examples.content

    async def test_history_precedes_user_message(
        self, composer: PromptComposer, other_company: Company, core_prompt
    ):
        history = [
            ChatTurn(role=MessageRole.USER, content="Price a deck"),
            ChatTurn(role=MessageRole.ASSISTANT, content="How large is it?"),
        ]

        messages = await composer.compose(
            other_company.id, "About 20 square metres", history=history
        )

        assert [(m.layer, m.role, m.content) for m in messages[1:]] == [
            (PromptLayer.HISTORY, MessageRole.USER, "Price a deck"),
            (PromptLayer.HISTORY, MessageRole.ASSISTANT, "How large is it?"),
            (PromptLayer.USER, MessageRole.USER, "About 20 square metres"),
        ]

"""AI routes: prompt composition, chat and structured drafting."""

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends

from quotewise.api.dependencies import DBSession
from quotewise.core.auth.dependencies import CurrentUser
from quotewise.modules.ai.extraction import (
    extraction_messages,
    parse_json_object,
    parse_line_items,
    parse_quote,
    with_quote_instructions,
)
from quotewise.modules.ai.providers import Provider
from quotewise.modules.ai.schemas import (
    ChatRequest,
    ChatResponse,
    ComposeRequest,
    ComposeResponse,
    ExtractLineItemsRequest,
    GenerateQuoteRequest,
    GenerateQuoteResponse,
    LineItemsResponse,
)
from quotewise.modules.prompts.composer import PromptComposer


logger = structlog.get_logger()

router = APIRouter(prefix="/ai", tags=["ai"])


def get_composer(db: DBSession) -> PromptComposer:
    return PromptComposer(db)


Composer = Annotated[PromptComposer, Depends(get_composer)]


@router.post(
    "/compose",
    response_model=ComposeResponse,
    summary="Preview the composed prompt",
    description="Returns the layered messages that would be sent for the caller's company.",
)
async def compose(
    data: ComposeRequest,
    current_user: CurrentUser,
    composer: Composer,
) -> ComposeResponse:
    messages = await composer.compose(
        current_user.company_id,
        data.user_message,
        client_id=data.client_id,
        history=data.history,
    )
    return ComposeResponse(messages=messages)


@router.post(
    "/chat",
    response_model=ChatResponse,
    summary="Chat with the quoting assistant",
    description=(
        "Accepts a single `message` or the whole conversation as `messages`, "
        "whose last entry must come from the user."
    ),
)
async def chat(
    data: ChatRequest,
    current_user: CurrentUser,
    composer: Composer,
    provider: Provider,
) -> ChatResponse:
    messages = await composer.compose(
        current_user.company_id,
        data.user_message,
        client_id=data.client_id,
        history=data.history,
    )
    reply = await provider.complete(messages)
    logger.info(
        "ai_chat_completed",
        user_id=str(current_user.id),
        layers=len(messages),
        turns=len(data.history) + 1,
    )
    return ChatResponse(reply=reply, layers=[m.layer.value for m in messages])


@router.post(
    "/extract-line-items",
    response_model=LineItemsResponse,
    summary="Extract line items from a conversation",
)
async def extract_line_items(
    data: ExtractLineItemsRequest,
    current_user: CurrentUser,
    provider: Provider,
) -> LineItemsResponse:
    reply = await provider.complete(extraction_messages(data.messages))
    items = parse_line_items(parse_json_object(reply).get("items"))
    logger.info("ai_line_items_extracted", user_id=str(current_user.id), items=len(items))
    return LineItemsResponse(items=items)


@router.post(
    "/generate-quote",
    response_model=GenerateQuoteResponse,
    summary="Draft a quote from a job description",
    description="The draft is returned only; create the quote with `POST /api/quotes`.",
)
async def generate_quote(
    data: GenerateQuoteRequest,
    current_user: CurrentUser,
    composer: Composer,
    provider: Provider,
) -> GenerateQuoteResponse:
    messages = await composer.compose(
        current_user.company_id,
        data.description,
        client_id=data.client_id,
    )
    reply = await provider.complete(with_quote_instructions(messages))
    draft = parse_quote(reply, fallback_description=data.description)
    logger.info(
        "ai_quote_drafted",
        user_id=str(current_user.id),
        items=len(draft.line_items),
        amount=draft.amount,
    )
    return GenerateQuoteResponse(quote=draft)

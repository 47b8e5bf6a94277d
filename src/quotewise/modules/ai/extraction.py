"""Structured output from the completion provider.

The provider only returns text. Line item extraction and quote drafting ask
it for a JSON object and parse that object here. Items that do not fit are
dropped one by one; a reply without any JSON object is an error.
"""

import json
from typing import Any

import structlog
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from quotewise.core.errors import ServiceUnavailableError
from quotewise.modules.ai.schemas import LineItem, QuoteDraft
from quotewise.modules.prompts.schemas import ChatTurn, ComposedMessage, MessageRole, PromptLayer


logger = structlog.get_logger()


LINE_ITEM_INSTRUCTIONS = """\
You extract structured line items from a conversation about a quote.
Look for items, quantities, prices and descriptions in the conversation.
Reply with a JSON object with an "items" key holding an array of objects with:
- description: string, the item or service
- quantity: number, 1 when not specified
- unitPrice: number, the price per unit in dollars
Reply with the JSON object only."""

QUOTE_INSTRUCTIONS = """\
Draft a quote for the job the user describes, following the guidance above.
Reply with a JSON object with these keys:
- title: string, a short name for the quote
- description: string, one paragraph summarising the scope
- lineItems: array of objects with description (string), quantity (number)
  and unitPrice (number, dollars per unit)
Reply with the JSON object only."""


class _DraftedItem(BaseModel):
    description: str = Field(..., min_length=1)
    quantity: float = Field(1, gt=0)
    unit_price: float = Field(..., ge=0, alias="unitPrice")


def transcript(turns: list[ChatTurn]) -> str:
    """Flatten a conversation into ``ROLE: content`` paragraphs."""
    return "\n\n".join(f"{turn.role.value.upper()}: {turn.content}" for turn in turns)


def extraction_messages(turns: list[ChatTurn]) -> list[ComposedMessage]:
    return [
        ComposedMessage(
            role=MessageRole.SYSTEM, content=LINE_ITEM_INSTRUCTIONS, layer=PromptLayer.TASK
        ),
        ComposedMessage(role=MessageRole.USER, content=transcript(turns), layer=PromptLayer.USER),
    ]


def with_quote_instructions(messages: list[ComposedMessage]) -> list[ComposedMessage]:
    """Insert the drafting instructions right before the user's message."""
    task = ComposedMessage(
        role=MessageRole.SYSTEM, content=QUOTE_INSTRUCTIONS, layer=PromptLayer.TASK
    )
    return [*messages[:-1], task, messages[-1]]


def parse_json_object(text: str) -> dict[str, Any]:
    """Find the outermost JSON object in a reply.

    Anything before the first ``{`` or after the last ``}``, such as prose or
    a code fence, is ignored.

    Raises:
        ServiceUnavailableError: If the reply holds no JSON object
    """
    start, end = text.find("{"), text.rfind("}")
    if start != -1 and end > start:
        try:
            data = json.loads(text[start : end + 1])
        except ValueError as exc:
            logger.warning("ai_output_not_json", error=str(exc), preview=text[:200])
        else:
            if isinstance(data, dict):
                return data
    else:
        logger.warning("ai_output_not_json", preview=text[:200])
    raise ServiceUnavailableError(
        "The AI service returned an unreadable answer",
        error_code="ai_invalid_output",
    )


def to_minor_units(amount: float) -> int:
    return round(amount * 100)


def parse_line_items(raw: Any) -> list[LineItem]:
    """Validate drafted items and convert prices to minor units.

    Args:
        raw: The ``items`` or ``lineItems`` member of the reply

    Returns:
        The valid items, in the order given
    """
    if not isinstance(raw, list):
        return []
    items: list[LineItem] = []
    for entry in raw:
        try:
            drafted = _DraftedItem.model_validate(entry)
        except PydanticValidationError as exc:
            logger.info("ai_line_item_skipped", errors=exc.error_count())
            continue
        unit_price = to_minor_units(drafted.unit_price)
        items.append(
            LineItem(
                description=drafted.description,
                quantity=drafted.quantity,
                unit_price=unit_price,
                total=round(unit_price * drafted.quantity),
            )
        )
    return items


def parse_quote(text: str, fallback_description: str) -> QuoteDraft:
    """Build a quote draft from the provider's reply.

    Missing title or description fall back to defaults; the amount is
    always the sum of the line items, never the model's own arithmetic.
    """
    data = parse_json_object(text)
    items = parse_line_items(data.get("lineItems", data.get("items")))
    title = data.get("title")
    description = data.get("description")
    return QuoteDraft(
        title=title if isinstance(title, str) and title else "Generated Quote",
        description=(
            description if isinstance(description, str) and description else fallback_description
        ),
        amount=sum(item.total for item in items),
        line_items=items,
    )

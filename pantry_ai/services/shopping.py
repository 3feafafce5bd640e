"""Shopping-list line parsing."""

from typing import Optional

from pantry_ai.llm.gemini import ModelInvoker
from pantry_ai.models.models import GenerationRequest, Intent, ShoppingListEntry
from pantry_ai.pipeline.extractor import PayloadShape, extract_payload
from pantry_ai.pipeline.fallbacks import default_shopping_entry
from pantry_ai.pipeline.normalizer import normalize_shopping_entry
from pantry_ai.prompts.prompts import build_prompt
from pantry_ai.utils.errors import safe_execute_async
from pantry_ai.utils.logger import logger


async def parse_shopping_list_item(text: str, invoker: Optional[ModelInvoker] = None) -> ShoppingListEntry:
    """Parse free text such as "2 lbs chicken breast" into a shopping-list entry.

    Falls back to one uncategorized unit of the trimmed text when no invoker
    is given, the model call fails, or the reply holds no usable object.

    Args:
        text: Free-text shopping-list line.
        invoker: Optional model client.

    Returns:
        ShoppingListEntry: Always a complete entry.
    """
    request = GenerationRequest(intent=Intent.SHOPPING_LIST, seed=text)

    if invoker is None:
        return default_shopping_entry(request.seed)

    reply = await safe_execute_async(
        invoker.invoke(build_prompt(request)),
        f"Shopping list model call for '{request.seed}'",
        log_level="warning",
    )
    if reply is None:
        return default_shopping_entry(request.seed)

    extraction = extract_payload(reply, PayloadShape.OBJECT)
    if extraction.failed:
        logger.warning(
            f"Shopping list parse for '{request.seed}' fell back to raw text: {extraction.error}",
            extra={"intent": request.intent.value},
        )
    return normalize_shopping_entry(extraction.payload, request.seed)

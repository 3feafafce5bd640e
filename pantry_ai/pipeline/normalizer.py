"""Coerce extracted payloads into closed, fully-populated records.

Model output is only loosely shaped: fields go missing, enums arrive in the
wrong case, numbers arrive as strings ("7 days"). Every normalizer here is
total over its input. Field-level problems are repaired with defaults and
never raise; a payload that is absent or of the wrong shape yields either the
intent's fallback record (quick defaults, shopping list) or None (recipe,
suggestion, detection), leaving the fatal decision to the service.
"""

import math
import re
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, List, Optional, Type, TypeVar

from pantry_ai.models.models import (
    DetectedItem,
    Difficulty,
    Guidance,
    PantryDefaults,
    PantryItemSuggestion,
    Recipe,
    ShoppingCategory,
    ShoppingListEntry,
    StorageLocation,
    SuggestionAction,
    SuggestionCandidate,
)
from pantry_ai.pipeline.fallbacks import DEFAULT_SHOPPING_UNIT, default_pantry_defaults, default_shopping_entry
from pantry_ai.utils.config import config

E = TypeVar("E", bound=Enum)

MAX_EXPIRY_DAYS = 3650
DEFAULT_CONFIDENCE = 0.7
MAX_NAME_LENGTH = 200
MAX_UNIT_LENGTH = 30

DEFAULT_RECIPE_TITLE = "Delicious Recipe"
DEFAULT_RECIPE_DESCRIPTION = "A wonderful meal made with your ingredients"
DEFAULT_PREP_TIME = "15 minutes"
DEFAULT_COOK_TIME = "30 minutes"
DEFAULT_RECIPE_TIPS = ["Enjoy your meal!"]

DEFAULT_DETECTED_NAME = "Unknown Item"
DEFAULT_QUANTITY = "1 item"

DEFAULT_GUIDANCE_MESSAGE = "Please be more specific about the item"
DEFAULT_GUIDANCE_REASONING = "The item name was too vague to identify"

NUMBER_PATTERN = re.compile(r"-?\d+(?:\.\d+)?")


# ============================================================================
# Field coercion
# ============================================================================


def coerce_text(value: Any, default: str, max_length: Optional[int] = None) -> str:
    """Non-empty string from any scalar, else ``default``."""
    if value is None or isinstance(value, (dict, list)):
        return default
    text = str(value).strip()
    if not text:
        return default
    return text[:max_length] if max_length else text


def coerce_text_list(value: Any) -> List[str]:
    """List of non-blank strings. A bare string becomes a one-item list."""
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        return []

    result = []
    for entry in value:
        if isinstance(entry, dict):
            # {"item": "flour", "amount": "2 cups"} style entries
            entry = " ".join(str(v).strip() for v in entry.values() if v is not None and str(v).strip())
        text = coerce_text(entry, "")
        if text:
            result.append(text)
    return result


def coerce_enum(value: Any, enum_cls: Type[E], default: Optional[E]) -> Optional[E]:
    """Case-insensitive lookup of ``value`` among the enum's values."""
    if isinstance(value, enum_cls):
        return value
    if not isinstance(value, str):
        return default
    folded = value.strip().casefold()
    for member in enum_cls:
        if member.value.casefold() == folded:
            return member
    return default


def coerce_number(value: Any) -> Optional[float]:
    """Float from a number or the first number inside a string ("7 days" -> 7.0).

    NaN and infinities (which ``json.loads`` accepts) count as no number.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        match = NUMBER_PATTERN.search(value)
        if not match:
            return None
        value = match.group()
    elif not isinstance(value, (int, float)):
        return None

    try:
        number = float(value)
    except OverflowError:
        return None
    return number if math.isfinite(number) else None


def coerce_days(value: Any, default: Optional[int] = None) -> int:
    """Whole days clamped to [0, MAX_EXPIRY_DAYS]."""
    if default is None:
        default = config.DEFAULT_EXPIRY_DAYS
    number = coerce_number(value)
    if number is None:
        return default
    return int(round(max(0.0, min(float(MAX_EXPIRY_DAYS), number))))


def coerce_confidence(value: Any, default: float = DEFAULT_CONFIDENCE) -> float:
    number = coerce_number(value)
    if number is None:
        return default
    return max(0.0, min(1.0, number))


# ============================================================================
# Per-intent normalizers
# ============================================================================


def normalize_recipe(payload: Any, servings: int) -> Optional[Recipe]:
    """Build a Recipe from an extracted object.

    Inventory reconciliation is left empty here; the recipe service fills
    ``have_ingredients`` / ``missing_ingredients`` afterwards.

    Args:
        payload: Extracted JSON value (expected: object).
        servings: Serving size from the request; the model's own value is ignored.

    Returns:
        Recipe or None if the payload is not an object.
    """
    if not isinstance(payload, dict):
        return None

    return Recipe(
        title=coerce_text(payload.get("title"), DEFAULT_RECIPE_TITLE, MAX_NAME_LENGTH),
        description=coerce_text(payload.get("description"), DEFAULT_RECIPE_DESCRIPTION),
        prep_time=coerce_text(payload.get("prepTime", payload.get("prep_time")), DEFAULT_PREP_TIME),
        cook_time=coerce_text(payload.get("cookTime", payload.get("cook_time")), DEFAULT_COOK_TIME),
        servings=servings,
        difficulty=coerce_enum(payload.get("difficulty"), Difficulty, Difficulty.MEDIUM),
        ingredients=coerce_text_list(payload.get("ingredients")),
        instructions=coerce_text_list(payload.get("instructions")),
        tips=coerce_text_list(payload.get("tips")) or list(DEFAULT_RECIPE_TIPS),
    )


def is_valid_recipe(recipe: Optional[Recipe]) -> bool:
    """A usable recipe has a title, ingredients and instructions."""
    return bool(recipe and recipe.title and recipe.ingredients and recipe.instructions)


def _normalize_pantry_suggestion(entry: Any) -> Optional[PantryItemSuggestion]:
    if not isinstance(entry, dict):
        return None
    name = coerce_text(entry.get("name"), "", MAX_NAME_LENGTH)
    if not name:
        return None

    days = coerce_days(entry.get("daysUntilExpiry", entry.get("days_until_expiry")))
    return PantryItemSuggestion(
        name=name,
        quantity=coerce_text(entry.get("quantity"), DEFAULT_QUANTITY),
        shelf_life=coerce_text(entry.get("shelfLife", entry.get("shelf_life")), f"{days} days"),
        location=coerce_enum(entry.get("location"), StorageLocation, StorageLocation.PANTRY),
        days_until_expiry=days,
    )


def normalize_guidance(payload: Any) -> Optional[Guidance]:
    if not isinstance(payload, dict):
        return None
    return Guidance(
        message=coerce_text(payload.get("message"), DEFAULT_GUIDANCE_MESSAGE),
        examples=coerce_text_list(payload.get("examples")),
        reasoning=coerce_text(payload.get("reasoning"), DEFAULT_GUIDANCE_REASONING),
    )


def normalize_suggestion_result(payload: Any) -> Optional[SuggestionCandidate]:
    """Normalize an item-suggestion object without classifying it.

    Suggestions without a name are dropped. The model's reported action is
    kept only for logging; the confidence classifier decides the real one.
    """
    if not isinstance(payload, dict):
        return None

    raw_suggestions = payload.get("suggestions")
    if not isinstance(raw_suggestions, list):
        raw_suggestions = []
    suggestions = [s for s in map(_normalize_pantry_suggestion, raw_suggestions) if s is not None]

    return SuggestionCandidate(
        confidence=coerce_confidence(payload.get("confidence")),
        reported_action=coerce_enum(payload.get("action"), SuggestionAction, None),
        suggestions=suggestions,
        guidance=normalize_guidance(payload.get("guidance")),
    )


def normalize_pantry_defaults(payload: Any, item_name: str) -> PantryDefaults:
    """Location and expiry for a new item; missing parts come from the keyword fallback."""
    fallback = default_pantry_defaults(item_name)
    if not isinstance(payload, dict):
        return fallback

    return PantryDefaults(
        location=coerce_enum(payload.get("location"), StorageLocation, fallback.location),
        days_until_expiry=coerce_days(
            payload.get("daysUntilExpiry", payload.get("days_until_expiry")),
            fallback.days_until_expiry,
        ),
    )


def _coerce_quantity(value: Any):
    number = coerce_number(value)
    if number is None or number <= 0:
        return 1
    return int(number) if number.is_integer() else number


def normalize_shopping_entry(payload: Any, text: str) -> ShoppingListEntry:
    """Structured shopping-list line; the raw text fills in a missing name."""
    fallback = default_shopping_entry(text)
    if not isinstance(payload, dict):
        return fallback

    return ShoppingListEntry(
        name=coerce_text(payload.get("name"), fallback.name, MAX_NAME_LENGTH),
        quantity=_coerce_quantity(payload.get("quantity")),
        unit=coerce_text(payload.get("unit"), DEFAULT_SHOPPING_UNIT, MAX_UNIT_LENGTH),
        category=coerce_enum(payload.get("category"), ShoppingCategory, ShoppingCategory.OTHER),
    )


def normalize_detected_items(payload: Any, now: Optional[datetime] = None) -> Optional[List[DetectedItem]]:
    """Detected items from an extracted array.

    Args:
        payload: Extracted JSON value (expected: array of objects). An object
            wrapping the array under ``items`` is accepted too.
        now: Reference time for ``expires_at``. Defaults to the current UTC time.

    Returns:
        List of DetectedItem (possibly empty), or None if no array was given.
    """
    if isinstance(payload, dict) and isinstance(payload.get("items"), list):
        payload = payload["items"]
    if not isinstance(payload, list):
        return None

    now = now or datetime.now(timezone.utc)
    items = []
    for entry in payload:
        if not isinstance(entry, dict):
            continue
        days = coerce_days(entry.get("daysUntilExpiry", entry.get("days_until_expiry")))
        items.append(
            DetectedItem(
                name=coerce_text(entry.get("name"), DEFAULT_DETECTED_NAME, MAX_NAME_LENGTH),
                quantity=coerce_text(entry.get("quantity"), DEFAULT_QUANTITY),
                location=coerce_enum(entry.get("location"), StorageLocation, StorageLocation.PANTRY),
                days_until_expiry=days,
                expires_at=now + timedelta(days=days),
                confidence=coerce_confidence(entry.get("confidence")),
            )
        )
    return items

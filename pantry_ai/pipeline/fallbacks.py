"""Deterministic defaults used when the model is unavailable or unusable.

Never calls the model and never fails, so quick defaults and shopping-list
parsing always produce a record.
"""

from pantry_ai.models.models import PantryDefaults, ShoppingCategory, ShoppingListEntry, StorageLocation
from pantry_ai.utils.config import config

# Item names containing any of these keywords are assumed to need refrigeration
FRIDGE_KEYWORDS = ("milk", "yogurt", "cheese", "meat", "fish")

DEFAULT_SHOPPING_UNIT = "each"


def default_pantry_defaults(item_name: str) -> PantryDefaults:
    """Keyword-based storage location with the default expiry window.

    Args:
        item_name: Free-text item name.

    Returns:
        PantryDefaults: fridge for perishable keywords, pantry otherwise.
    """
    name = (item_name or "").lower()
    location = StorageLocation.FRIDGE if any(k in name for k in FRIDGE_KEYWORDS) else StorageLocation.PANTRY
    return PantryDefaults(location=location, days_until_expiry=config.DEFAULT_EXPIRY_DAYS)


def default_shopping_entry(text: str) -> ShoppingListEntry:
    """Single uncategorized unit of whatever the user typed."""
    name = (text or "").strip()
    name = name[:1].upper() + name[1:] if name else "Item"
    return ShoppingListEntry(
        name=name[:200],
        quantity=1,
        unit=DEFAULT_SHOPPING_UNIT,
        category=ShoppingCategory.OTHER,
    )

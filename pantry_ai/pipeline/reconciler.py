"""Partition recipe ingredient lines against what the user already has."""

from typing import Iterable, List

from pantry_ai.models.models import InventoryItem, ReconciliationResult


def _fold(value: str) -> str:
    return value.strip().casefold()


def loosely_matches(line: str, name: str) -> bool:
    """Case-insensitive substring containment in either direction.

    "3 eggs" matches "Eggs" and "egg" matches "3 eggs". The loose rule favors
    recall: "rice" also matches "rice vinegar".
    """
    line, name = _fold(line), _fold(name)
    if not line or not name:
        return False
    return name in line or line in name


def _matches_any(line: str, names: List[str]) -> bool:
    return any(loosely_matches(line, name) for name in names)


def reconcile_ingredients(
    recipe_ingredients: Iterable[str],
    inventory: Iterable[InventoryItem],
    requested: Iterable[str] = (),
) -> ReconciliationResult:
    """Split recipe lines into have / requested / missing buckets.

    Inventory matches win over requested matches; every line lands in exactly
    one bucket and input order is kept within each bucket.

    Args:
        recipe_ingredients: Ingredient lines of a generated recipe.
        inventory: Items the user currently has.
        requested: Ingredients the user asked the recipe to use.

    Returns:
        ReconciliationResult: Disjoint partition of the recipe lines.
    """
    inventory_names = [item.name for item in inventory if item.name and item.name.strip()]
    requested_names = [name for name in requested if name and name.strip()]

    have, missing, from_request = [], [], []
    for line in recipe_ingredients:
        if _matches_any(line, inventory_names):
            have.append(line)
        elif _matches_any(line, requested_names):
            from_request.append(line)
        else:
            missing.append(line)

    return ReconciliationResult(
        have_ingredients=have,
        missing_ingredients=missing,
        requested_ingredients=from_request,
    )

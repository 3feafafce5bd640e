"""Data models and schemas for the Pantry AI pipeline.

Defines Pydantic models for requests, inventory snapshots and every normalized
record the pipeline can hand back to a caller. All models use Pydantic v2.

Records are frozen once built and serialize with camelCase aliases
(``daysUntilExpiry``, ``haveIngredients``, ``familyId``) to match the wire
format the web client expects; snake_case names are accepted on input too.
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


RECORD_CONFIG = ConfigDict(
    str_strip_whitespace=True,
    alias_generator=to_camel,
    populate_by_name=True,
    frozen=True,
)


class Intent(str, Enum):
    """Extraction task a request is for."""

    RECIPE = "recipe"
    ITEM_SUGGESTION = "item_suggestion"
    QUICK_DEFAULTS = "quick_defaults"
    IMAGE_DETECTION = "image_detection"
    SHOPPING_LIST = "shopping_list"


class Complexity(str, Enum):
    """Recipe complexity tier."""

    QUICK = "quick"
    SOPHISTICATED = "sophisticated"


class StorageLocation(str, Enum):
    PANTRY = "pantry"
    FRIDGE = "fridge"
    FREEZER = "freezer"


class Difficulty(str, Enum):
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"


class ShoppingCategory(str, Enum):
    PRODUCE = "produce"
    DAIRY = "dairy"
    MEAT = "meat"
    PANTRY = "pantry"
    FROZEN = "frozen"
    OTHER = "other"


class SuggestionAction(str, Enum):
    """Confidence tier driving what the client shows next."""

    ACCEPT = "accept"
    CHOOSE = "choose"
    SPECIFY = "specify"


# ============================================================================
# Inputs
# ============================================================================


class InventoryItem(BaseModel):
    """One entry of a caller-supplied inventory snapshot.

    ``days_until_expiry`` may be negative for items that already expired.
    """

    model_config = RECORD_CONFIG

    name: Annotated[str, Field(min_length=1, max_length=200, description="Item name as stored by the user")]
    quantity: Annotated[Optional[str], Field(max_length=100, description="Free-form amount, e.g. '2 lbs'")] = None
    days_until_expiry: Annotated[
        Optional[int], Field(description="Remaining days before expiry (negative = already expired)")
    ] = None


InventorySnapshot = List[InventoryItem]


class GenerationRequest(BaseModel):
    """Immutable description of one extraction request.

    ``seed`` carries the free-text input for item suggestion, quick defaults and
    shopping-list intents. Recipe requests use ``ingredients`` and the
    contextual constraints instead; ``variant_index`` is set by the variant
    orchestrator when a batch fans out.
    """

    model_config = RECORD_CONFIG

    intent: Intent
    seed: Annotated[Optional[str], Field(max_length=500, description="Item name or free-text line")] = None
    ingredients: Annotated[List[str], Field(default_factory=list, max_length=50)]
    serving_size: Annotated[int, Field(ge=1, le=50, description="Number of servings (1-50)")] = 2
    dietary_restrictions: Annotated[Optional[str], Field(max_length=500)] = None
    complexity: Complexity = Complexity.QUICK
    inventory: Annotated[List[InventoryItem], Field(default_factory=list)]
    use_all_inventory: bool = False
    include_dessert: bool = False
    variant_count: Annotated[
        int, Field(ge=1, description="Number of recipe variants to generate (capped by MAX_VARIANTS)")
    ] = 1
    variant_index: Annotated[int, Field(ge=1, description="1-based position of this variant")] = 1

    @field_validator("ingredients", mode="before")
    @classmethod
    def drop_blank_ingredients(cls, v):
        """Strip ingredient names and drop empty ones."""
        if v is None:
            return []
        if isinstance(v, str):
            v = v.split(",")
        return [str(item).strip() for item in v if item is not None and str(item).strip()]

    @model_validator(mode="after")
    def validate_intent_inputs(self) -> "GenerationRequest":
        """Ensure the request carries what its intent needs."""
        if self.variant_index > self.variant_count:
            raise ValueError(
                f"variant_index {self.variant_index} exceeds variant_count {self.variant_count}"
            )
        if self.intent == Intent.RECIPE:
            if not self.ingredients and not (self.use_all_inventory and self.inventory):
                raise ValueError("Ingredients are required or select to use all inventory items")
        elif self.intent in (Intent.ITEM_SUGGESTION, Intent.QUICK_DEFAULTS, Intent.SHOPPING_LIST):
            if not self.seed:
                raise ValueError(f"A non-empty seed is required for intent '{self.intent.value}'")
        return self


class ImageAttachment(BaseModel):
    """Binary image sent alongside an image-detection prompt."""

    model_config = ConfigDict(frozen=True)

    data: bytes
    mime_type: str


# ============================================================================
# Normalized records
# ============================================================================


class Recipe(BaseModel):
    """A generated recipe with its inventory reconciliation.

    ``family_id`` and ``variant_index`` are only set for recipes produced as part
    of a multi-variant batch.
    """

    model_config = RECORD_CONFIG

    title: Annotated[str, Field(min_length=1, max_length=200)]
    description: Annotated[str, Field(min_length=1)]
    prep_time: Annotated[str, Field(min_length=1)]
    cook_time: Annotated[str, Field(min_length=1)]
    servings: Annotated[int, Field(ge=1, le=50)]
    difficulty: Difficulty
    ingredients: List[str]
    instructions: List[str]
    tips: Annotated[List[str], Field(default_factory=list)]
    have_ingredients: Annotated[
        List[str], Field(default_factory=list, description="Recipe lines matched against the inventory")
    ]
    missing_ingredients: Annotated[
        List[str], Field(default_factory=list, description="Recipe lines the user still has to acquire")
    ]
    family_id: Optional[str] = None
    variant_index: Annotated[Optional[int], Field(ge=1)] = None


class PantryItemSuggestion(BaseModel):
    """A concrete pantry entry proposed for a vague item name."""

    model_config = RECORD_CONFIG

    name: Annotated[str, Field(min_length=1, max_length=200)]
    quantity: Annotated[str, Field(min_length=1)]
    shelf_life: Annotated[str, Field(min_length=1)]
    location: StorageLocation
    days_until_expiry: Annotated[int, Field(ge=0)]


class PantryDefaults(BaseModel):
    """Storage location and expiry window pre-filled for a new pantry item."""

    model_config = RECORD_CONFIG

    location: StorageLocation
    days_until_expiry: Annotated[int, Field(ge=0)]


class ShoppingListEntry(BaseModel):
    """A structured shopping-list line parsed from free text."""

    model_config = RECORD_CONFIG

    name: Annotated[str, Field(min_length=1, max_length=200)]
    quantity: Annotated[Union[int, float], Field(gt=0)]
    unit: Annotated[str, Field(min_length=1, max_length=30)]
    category: ShoppingCategory


class DetectedItem(BaseModel):
    """A food item recognized in an uploaded photo."""

    model_config = RECORD_CONFIG

    name: Annotated[str, Field(min_length=1, max_length=200)]
    quantity: Annotated[str, Field(min_length=1)]
    location: StorageLocation
    days_until_expiry: Annotated[int, Field(ge=0)]
    expires_at: datetime
    confidence: Annotated[float, Field(ge=0.0, le=1.0)]
    detected_by: Literal["ai"] = "ai"


class Guidance(BaseModel):
    """Help text shown when the model cannot pin an item down."""

    model_config = RECORD_CONFIG

    message: Annotated[str, Field(min_length=1)]
    examples: Annotated[List[str], Field(default_factory=list)]
    reasoning: Annotated[str, Field(min_length=1)]


class SuggestionCandidate(BaseModel):
    """Normalized but not yet classified item-suggestion response.

    ``reported_action`` is whatever the model claimed; the confidence
    classifier decides the action that is actually exposed.
    """

    model_config = RECORD_CONFIG

    confidence: Annotated[float, Field(ge=0.0, le=1.0)]
    reported_action: Optional[SuggestionAction] = None
    suggestions: Annotated[List[PantryItemSuggestion], Field(default_factory=list)]
    guidance: Optional[Guidance] = None


class ConfidenceResult(BaseModel):
    """Classified item suggestion.

    Cardinality of ``suggestions`` is tied to ``action``: exactly one for
    accept, two to four for choose, none for specify (which always carries
    guidance).
    """

    model_config = RECORD_CONFIG

    confidence: Annotated[float, Field(ge=0.0, le=1.0)]
    action: SuggestionAction
    suggestions: Annotated[List[PantryItemSuggestion], Field(default_factory=list, max_length=4)]
    guidance: Optional[Guidance] = None

    @model_validator(mode="after")
    def validate_action_cardinality(self) -> "ConfidenceResult":
        """Enforce the suggestion count each action promises."""
        count = len(self.suggestions)
        if self.action == SuggestionAction.ACCEPT and count != 1:
            raise ValueError(f"accept requires exactly one suggestion, got {count}")
        if self.action == SuggestionAction.CHOOSE and not 2 <= count <= 4:
            raise ValueError(f"choose requires 2-4 suggestions, got {count}")
        if self.action == SuggestionAction.SPECIFY:
            if count:
                raise ValueError(f"specify must not carry suggestions, got {count}")
            if self.guidance is None:
                raise ValueError("specify requires guidance")
        return self


class ReconciliationResult(BaseModel):
    """Partition of a recipe's ingredient lines against what the user has.

    Every recipe line lands in exactly one bucket. ``requested_ingredients``
    holds lines that matched only the originally requested ingredients; they
    are neither "from inventory" nor "missing".
    """

    model_config = RECORD_CONFIG

    have_ingredients: Annotated[List[str], Field(default_factory=list)]
    missing_ingredients: Annotated[List[str], Field(default_factory=list)]
    requested_ingredients: Annotated[List[str], Field(default_factory=list)]


class VariantBatch(BaseModel):
    """Successful multi-variant recipe generation (never empty)."""

    model_config = RECORD_CONFIG

    family_id: Annotated[str, Field(min_length=1, description="Correlation id shared by all variants")]
    requested_count: Annotated[int, Field(ge=1)]
    results: Annotated[List[Recipe], Field(min_length=1)]

"""Prompt builders for every pipeline intent.

Each builder is a pure function of a GenerationRequest: identical input always
yields byte-identical text, so prompts can be golden-tested without calling
the model. Every prompt carries a fixed task description, a literal example
of the JSON shape expected back, and intent-specific guidance sections that
are only included when their inputs are present.
"""

from pantry_ai.models.models import Complexity, GenerationRequest, InventoryItem, Intent

# Items expiring within this many days are flagged for priority use
EXPIRY_PRIORITY_DAYS = 3

RECIPE_JSON_EXAMPLE = """{
  "title": "Recipe Name",
  "description": "Brief appealing description",
  "prepTime": "X minutes",
  "cookTime": "X minutes",
  "difficulty": "Easy/Medium/Hard",
  "ingredients": [
    "ingredient with amount",
    "another ingredient with amount"
  ],
  "instructions": [
    "Step 1 instruction",
    "Step 2 instruction"
  ],
  "tips": [
    "Helpful cooking tip",
    "Another useful tip"
  ]
}"""

SUGGESTION_JSON_EXAMPLE = """{
  "confidence": 0.0-1.0,
  "action": "accept" | "choose" | "specify",
  "suggestions": [
    {
      "name": "Specific item name",
      "quantity": "Amount with unit",
      "shelfLife": "X days",
      "location": "pantry" | "fridge" | "freezer",
      "daysUntilExpiry": number
    }
  ],
  "guidance": {
    "message": "Helpful message",
    "examples": ["example1", "example2"],
    "reasoning": "Why this confidence level"
  }
}"""

QUICK_DEFAULTS_JSON_EXAMPLE = """{
  "location": "pantry" | "fridge" | "freezer",
  "daysUntilExpiry": number
}"""

DETECTION_JSON_EXAMPLE = """[
  {
    "name": "Item name",
    "quantity": "Amount with unit",
    "location": "pantry|fridge|freezer",
    "daysUntilExpiry": number,
    "confidence": 0.0-1.0
  }
]"""

SHOPPING_JSON_EXAMPLE = """{
  "name": "item name with qualifiers preserved",
  "quantity": number,
  "unit": "lbs|oz|kg|g|gallons|cups|tbsp|tsp|each|bunch|bag|can|box|bottle|jar|dozen|pack|loaf|ct",
  "category": "produce|dairy|meat|pantry|frozen|other"
}"""


# ============================================================================
# Recipe sections
# ============================================================================


def _format_inventory_line(item: InventoryItem) -> str:
    line = item.name
    if item.quantity:
        line += f" - {item.quantity}"
    if item.days_until_expiry is not None:
        if item.days_until_expiry < 0:
            line += f" (expired {abs(item.days_until_expiry)} days ago)"
        else:
            line += f" ({item.days_until_expiry} days until expiry)"
    return line


def _get_ingredient_section(request: GenerationRequest) -> str:
    """Required-ingredients block, or the use-your-pantry instruction."""
    if request.use_all_inventory and request.inventory:
        return (
            "\n\nUSE YOUR PANTRY: Create a recipe using ingredients from the available pantry items below. "
            "You don't need to use every single item, but try to use a good variety that makes sense together."
        )
    if request.ingredients:
        return f"\n\nREQUIRED INGREDIENTS: {', '.join(request.ingredients)} - ALL of these must be used in the recipe"
    return ""


def _get_inventory_section(request: GenerationRequest) -> str:
    """Inventory-priority block. Empty when the inventory snapshot is empty.

    Args:
        request: Recipe request carrying the inventory snapshot.

    Returns:
        str: Section listing every item with its remaining days and the
        instruction to prefer items expiring soon.
    """
    if not request.inventory:
        return ""

    lines = "\n".join(_format_inventory_line(item) for item in request.inventory)
    if request.use_all_inventory:
        header = "AVAILABLE PANTRY ITEMS:"
        usage = "- Use as many pantry items as makes sense for the recipe"
    else:
        header = "ADDITIONAL PANTRY ITEMS (optional to use):"
        usage = "- Mark which ingredients come from the pantry vs need to be purchased"

    return (
        f"\n\n{header}\n{lines}\n"
        f"- PRIORITIZE using items that expire soon ({EXPIRY_PRIORITY_DAYS} days or less)\n"
        f"{usage}"
    )


def _get_complexity_section(complexity: Complexity) -> str:
    if complexity == Complexity.SOPHISTICATED:
        return (
            "\n- CREATE A SOPHISTICATED RECIPE: Use advanced cooking techniques, complex flavor profiles, "
            "multiple cooking methods, longer prep/cook times (45+ minutes total), restaurant-quality presentation"
        )
    return (
        "\n- CREATE A QUICK & EASY RECIPE: Simple techniques, minimal prep, 15-30 minute total time, "
        "accessible for home cooks, streamlined process"
    )


def _get_dessert_section(include_dessert: bool) -> str:
    if include_dessert:
        return "\n- INCLUDE A DESSERT COMPONENT: Add a dessert recipe that complements the main meal"
    return "\n- MAIN MEAL ONLY: Create only the main meal recipe, no desserts or multiple courses"


def _get_variation_section(variant_index: int) -> str:
    """Divergence instructions for every variant after the first."""
    if variant_index <= 1:
        return ""
    return (
        f"\n- This is variation #{variant_index} - make it DISTINCTLY DIFFERENT from other variations "
        "in cooking method, cuisine style, or flavor profile. Ensure variety in:\n"
        "  * Cooking methods (stir-fry, baked, grilled, etc.)\n"
        "  * Cuisine types (Italian, Asian, American, etc.)\n"
        "  * Meal types (unless ingredients are very limited)"
    )


def build_recipe_prompt(request: GenerationRequest) -> str:
    """Build the recipe-generation prompt for one variant.

    Args:
        request: Recipe request (ingredients, constraints, inventory, variant index).

    Returns:
        str: Complete prompt text.
    """
    restrictions = (
        f"\n- Follow these dietary restrictions: {request.dietary_restrictions}"
        if request.dietary_restrictions
        else ""
    )

    return f"""Create a complete recipe{_get_ingredient_section(request)}{_get_inventory_section(request)}

Requirements:
- Serves {request.serving_size} people
- Include prep time and cook time
- Rate difficulty as Easy, Medium, or Hard
- Provide a brief description{restrictions}{_get_complexity_section(request.complexity)}{_get_dessert_section(request.include_dessert)}{_get_variation_section(request.variant_index)}

Please format your response EXACTLY like this JSON structure:
{RECIPE_JSON_EXAMPLE}

Make sure the recipe is practical, delicious, and uses the provided ingredients as the main components. Add common pantry staples as needed."""


# ============================================================================
# Pantry item prompts
# ============================================================================


def build_suggestion_prompt(request: GenerationRequest) -> str:
    """Prompt asking the model to pin a vague item name down to pantry entries."""
    return f"""Analyze this food/pantry item name: "{request.seed}"

Your goal is to help users create specific, useful pantry entries. Provide suggestions based on confidence level:

HIGH CONFIDENCE (>80%): Item is specific and clearly identifiable
- Return ONE detailed suggestion with exact name, typical quantity, shelf life
- Example: "eggs" → "Large white eggs, dozen, 21-28 days"

MEDIUM CONFIDENCE (40-80%): Item is recognizable but vague/ambiguous
- Return 3-4 common specific variations
- Include brand examples and common sizes
- Encourage user to be more specific
- Example: "chocolate" → ["Milk chocolate bar 1.5oz", "Dark chocolate chips 12oz", "Chocolate candy assorted 8oz"]

LOW CONFIDENCE (<40%): Item is too vague, unclear, or non-food
- Return NO suggestions
- Provide guidance on being more specific
- Give examples of better alternatives
- Suggest photo upload for unclear items
- Example: "stuff" → guidance to be more specific

Focus on:
- Common grocery items and typical household sizes
- Realistic shelf life estimates (in days)
- Encouraging specificity over generic terms
- Educational guidance for better entries

Return JSON format:
{SUGGESTION_JSON_EXAMPLE}"""


def build_quick_defaults_prompt(request: GenerationRequest) -> str:
    """Prompt for the storage location and expiry window of a new item."""
    return f"""For the food item "{request.seed}", provide quick smart defaults for location and expiry days.

Respond with ONLY this JSON format (no other text):
{QUICK_DEFAULTS_JSON_EXAMPLE}

Use these rules:
- Fresh produce, dairy, meat → "fridge"
- Frozen items → "freezer"
- Dry goods, canned items, snacks → "pantry"
- Reasonable expiry days (1-3 for fresh, 7-30 for pantry items)"""


def build_detection_prompt(request: GenerationRequest) -> str:
    """Prompt sent together with an uploaded photo for food detection."""
    return f"""You are an expert at identifying food items in images. Analyze this image and detect all food items visible.

For each item detected, you MUST provide ALL fields:
1. Name: Be specific (e.g., "Honeycrisp Apples" not just "apples", "Whole Wheat Bread" not just "bread")
2. Quantity: Estimate based on visual cues (e.g., "3 apples", "1 loaf", "2 lbs", "1 carton")
3. Location: ALWAYS determine storage location based on item type:
   - Fresh produce, dairy, meat, leftovers → "fridge"
   - Frozen items → "freezer"
   - Dry goods, canned items, snacks, spices → "pantry"
4. Days until expiry: ALWAYS estimate realistic shelf life:
   - Fresh produce: 3-10 days
   - Dairy: 5-14 days
   - Meat/fish: 1-5 days
   - Bread: 3-7 days
   - Pantry items: 30-365 days
   - Consider visible freshness cues
5. Confidence: Your confidence level (0.0-1.0) in this detection

CRITICAL: Every item MUST have location and daysUntilExpiry fields filled with realistic values.

Respond ONLY with a JSON array, no other text:
{DETECTION_JSON_EXAMPLE}

If no food items are detected, return an empty array: []"""


# ============================================================================
# Shopping list prompt
# ============================================================================

SHOPPING_EXAMPLES = (
    ('2 lbs chicken breast', '{"name": "Chicken Breast", "quantity": 2, "unit": "lbs", "category": "meat"}'),
    ('milk', '{"name": "Milk", "quantity": 1, "unit": "gallon", "category": "dairy"}'),
    ('3 apples', '{"name": "Apples", "quantity": 3, "unit": "each", "category": "produce"}'),
    ('dozen eggs', '{"name": "Eggs", "quantity": 12, "unit": "each", "category": "dairy"}'),
    ('2% milk', '{"name": "2% Milk", "quantity": 1, "unit": "gallon", "category": "dairy"}'),
    ('coca cola 1ltr', '{"name": "Coca Cola", "quantity": 1, "unit": "Ltr", "category": "other"}'),
    ('extra virgin olive oil', '{"name": "Extra Virgin Olive Oil", "quantity": 1, "unit": "bottle", "category": "pantry"}'),
    ('whole wheat bread', '{"name": "Whole Wheat Bread", "quantity": 1, "unit": "loaf", "category": "pantry"}'),
)


def build_shopping_list_prompt(request: GenerationRequest) -> str:
    """Prompt turning one free-text shopping line into a structured entry."""
    examples = "\n".join(f'- "{text}" -> {parsed}' for text, parsed in SHOPPING_EXAMPLES)

    return f"""You are a shopping list assistant. Parse the following text into a structured item.

Input: "{request.seed}"

Output JSON format:
{SHOPPING_JSON_EXAMPLE}

Examples:
{examples}

Rules:
- Default quantity is 1
- Default unit is "each"
- Category MUST be one of: produce, dairy, meat, pantry, frozen, other
- PRESERVE ALL qualifiers and descriptors: "2%", "organic", "greek", "extra virgin", varieties, etc.
- CAPITALIZE each significant word in the item name (title case)
- Recognize and properly capitalize brand names: "Coca Cola", "Cheerios", "Kraft", etc.
- DO NOT over-simplify or normalize away important context
- If unit is ambiguous, use common sense (milk = gallon, chicken = lbs, eggs = dozen/each, oil = bottle, bread = loaf)
- Handle "dozen" = 12 each
- If the item doesn't fit clearly, use category "other"

Return ONLY valid JSON, no explanation or markdown formatting."""


PROMPT_BUILDERS = {
    Intent.RECIPE: build_recipe_prompt,
    Intent.ITEM_SUGGESTION: build_suggestion_prompt,
    Intent.QUICK_DEFAULTS: build_quick_defaults_prompt,
    Intent.IMAGE_DETECTION: build_detection_prompt,
    Intent.SHOPPING_LIST: build_shopping_list_prompt,
}


def build_prompt(request: GenerationRequest) -> str:
    """Build the prompt for any intent.

    Args:
        request: The generation request; its intent selects the builder.

    Returns:
        str: Deterministic prompt text.
    """
    return PROMPT_BUILDERS[request.intent](request)

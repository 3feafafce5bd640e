"""Unit tests for prompt builders."""

import pytest

from pantry_ai.models.models import Complexity, GenerationRequest, Intent
from pantry_ai.prompts.prompts import (
    build_detection_prompt,
    build_prompt,
    build_quick_defaults_prompt,
    build_recipe_prompt,
    build_shopping_list_prompt,
    build_suggestion_prompt,
)


def recipe_request(**overrides):
    data = dict(intent=Intent.RECIPE, ingredients=["chicken", "rice"])
    data.update(overrides)
    return GenerationRequest(**data)


class TestBuildPrompt:
    """Test dispatch and determinism."""

    @pytest.mark.parametrize(
        "request_kwargs,builder",
        [
            ({"intent": Intent.RECIPE, "ingredients": ["eggs"]}, build_recipe_prompt),
            ({"intent": Intent.ITEM_SUGGESTION, "seed": "chocolate"}, build_suggestion_prompt),
            ({"intent": Intent.QUICK_DEFAULTS, "seed": "milk"}, build_quick_defaults_prompt),
            ({"intent": Intent.IMAGE_DETECTION}, build_detection_prompt),
            ({"intent": Intent.SHOPPING_LIST, "seed": "2 lbs chicken"}, build_shopping_list_prompt),
        ],
    )
    def test_dispatches_by_intent(self, request_kwargs, builder):
        request = GenerationRequest(**request_kwargs)

        assert build_prompt(request) == builder(request)

    def test_identical_requests_give_identical_prompts(self):
        inventory = [{"name": "Eggs", "quantity": "6", "daysUntilExpiry": 2}]

        first = build_prompt(recipe_request(inventory=inventory, variant_count=3, variant_index=2))
        second = build_prompt(recipe_request(inventory=inventory, variant_count=3, variant_index=2))

        assert first == second


class TestRecipePrompt:
    """Test conditional recipe prompt sections."""

    def test_required_ingredients_and_servings(self):
        prompt = build_recipe_prompt(recipe_request(serving_size=4))

        assert "REQUIRED INGREDIENTS: chicken, rice" in prompt
        assert "Serves 4 people" in prompt
        assert '"prepTime": "X minutes"' in prompt

    def test_no_inventory_section_without_inventory(self):
        prompt = build_recipe_prompt(recipe_request())

        assert "PANTRY ITEMS" not in prompt
        assert "PRIORITIZE" not in prompt

    def test_inventory_section_lists_items_and_priority(self):
        inventory = [
            {"name": "Spinach", "quantity": "1 bag", "daysUntilExpiry": 2},
            {"name": "Yogurt", "daysUntilExpiry": -1},
            {"name": "Rice"},
        ]
        prompt = build_recipe_prompt(recipe_request(inventory=inventory))

        assert "ADDITIONAL PANTRY ITEMS (optional to use):" in prompt
        assert "Spinach - 1 bag (2 days until expiry)" in prompt
        assert "Yogurt (expired 1 days ago)" in prompt
        assert "\nRice\n" in prompt
        assert "PRIORITIZE using items that expire soon (3 days or less)" in prompt

    def test_use_all_inventory_replaces_required_ingredients(self):
        prompt = build_recipe_prompt(
            GenerationRequest(intent=Intent.RECIPE, use_all_inventory=True, inventory=[{"name": "Eggs"}])
        )

        assert "USE YOUR PANTRY" in prompt
        assert "AVAILABLE PANTRY ITEMS:" in prompt
        assert "REQUIRED INGREDIENTS" not in prompt

    def test_complexity_blocks_are_exclusive(self):
        quick = build_recipe_prompt(recipe_request())
        fancy = build_recipe_prompt(recipe_request(complexity=Complexity.SOPHISTICATED))

        assert "QUICK & EASY" in quick and "SOPHISTICATED" not in quick
        assert "SOPHISTICATED" in fancy and "QUICK & EASY" not in fancy

    def test_dessert_block(self):
        assert "MAIN MEAL ONLY" in build_recipe_prompt(recipe_request())
        assert "INCLUDE A DESSERT COMPONENT" in build_recipe_prompt(recipe_request(include_dessert=True))

    def test_dietary_restrictions_only_when_given(self):
        assert "dietary restrictions" not in build_recipe_prompt(recipe_request())
        prompt = build_recipe_prompt(recipe_request(dietary_restrictions="vegetarian"))
        assert "Follow these dietary restrictions: vegetarian" in prompt

    def test_variation_block_only_after_first_variant(self):
        first = build_recipe_prompt(recipe_request(variant_count=3, variant_index=1))
        third = build_recipe_prompt(recipe_request(variant_count=3, variant_index=3))

        assert "variation #" not in first
        assert "This is variation #3 - make it DISTINCTLY DIFFERENT" in third


class TestItemPrompts:
    def test_suggestion_prompt_quotes_item(self):
        prompt = build_suggestion_prompt(GenerationRequest(intent=Intent.ITEM_SUGGESTION, seed="chocolate"))

        assert 'item name: "chocolate"' in prompt
        assert "HIGH CONFIDENCE (>80%)" in prompt
        assert '"action": "accept" | "choose" | "specify"' in prompt

    def test_quick_defaults_prompt(self):
        prompt = build_quick_defaults_prompt(GenerationRequest(intent=Intent.QUICK_DEFAULTS, seed="milk"))

        assert 'food item "milk"' in prompt
        assert '"daysUntilExpiry": number' in prompt

    def test_detection_prompt_asks_for_array(self):
        prompt = build_detection_prompt(GenerationRequest(intent=Intent.IMAGE_DETECTION))

        assert "JSON array" in prompt
        assert "return an empty array: []" in prompt

    def test_shopping_prompt_lists_categories(self):
        prompt = build_shopping_list_prompt(GenerationRequest(intent=Intent.SHOPPING_LIST, seed="2% milk"))

        assert 'Input: "2% milk"' in prompt
        assert "produce, dairy, meat, pantry, frozen, other" in prompt

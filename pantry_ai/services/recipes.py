"""Recipe generation: single recipes and multi-variant batches."""

from typing import Union

from pantry_ai.llm.gemini import ModelInvoker
from pantry_ai.models.models import GenerationRequest, Intent, Recipe, VariantBatch
from pantry_ai.pipeline.extractor import PayloadShape, extract_payload
from pantry_ai.pipeline.normalizer import is_valid_recipe, normalize_recipe
from pantry_ai.pipeline.orchestrator import generate_recipe_batch
from pantry_ai.pipeline.reconciler import reconcile_ingredients
from pantry_ai.prompts.prompts import build_prompt
from pantry_ai.utils.config import config
from pantry_ai.utils.errors import ExtractionError, RecipeValidationError
from pantry_ai.utils.logger import logger


async def generate_single_recipe(request: GenerationRequest, invoker: ModelInvoker) -> Recipe:
    """Generate and reconcile the recipe for one variant of a request.

    Raises:
        ExtractionError: If the reply holds no JSON object.
        RecipeValidationError: If the recipe lacks ingredients or instructions.
    """
    log_extra = {"intent": request.intent.value, "variant_index": request.variant_index}

    text = await invoker.invoke(build_prompt(request))
    extraction = extract_payload(text, PayloadShape.OBJECT)
    recipe = normalize_recipe(extraction.payload, request.serving_size)
    if recipe is None:
        logger.error(f"Recipe response unusable: {extraction.error}", extra=log_extra)
        raise ExtractionError(details={"intent": request.intent.value, "reason": extraction.error})

    if not is_valid_recipe(recipe):
        missing = [field for field in ("ingredients", "instructions") if not getattr(recipe, field)]
        logger.error(f"Invalid recipe format from AI, missing {missing}: {text[:200]!r}", extra=log_extra)
        raise RecipeValidationError(details={"missing_fields": missing})

    reconciliation = reconcile_ingredients(recipe.ingredients, request.inventory, request.ingredients)
    logger.debug(
        f"Recipe '{recipe.title}': {len(reconciliation.have_ingredients)} from inventory, "
        f"{len(reconciliation.missing_ingredients)} missing",
        extra=log_extra,
    )
    return recipe.model_copy(
        update={
            "have_ingredients": reconciliation.have_ingredients,
            "missing_ingredients": reconciliation.missing_ingredients,
        }
    )


async def generate_recipes(request: GenerationRequest, invoker: ModelInvoker) -> Union[Recipe, VariantBatch]:
    """Generate one recipe, or a batch of distinct variants.

    A single recipe is returned directly and any failure is raised. With
    ``variant_count`` > 1 the variants run concurrently; failed variants are
    dropped and only a batch with no valid recipe fails.

    Args:
        request: Recipe request.
        invoker: Model client.

    Returns:
        Recipe when one variant was requested, VariantBatch otherwise.

    Raises:
        ValueError: If the request is not a recipe request or asks for too many variants.
        ExtractionError, RecipeValidationError: Single recipe failures.
        BatchGenerationError: If every variant failed.
    """
    if request.intent != Intent.RECIPE:
        raise ValueError(f"Expected a recipe request, got intent '{request.intent.value}'")
    if request.variant_count > config.MAX_VARIANTS:
        raise ValueError(f"variant_count must be at most {config.MAX_VARIANTS}, got: {request.variant_count}")

    if request.variant_count == 1:
        return await generate_single_recipe(request, invoker)

    async def _produce(index: int) -> Recipe:
        return await generate_single_recipe(request.model_copy(update={"variant_index": index}), invoker)

    return await generate_recipe_batch(request.variant_count, _produce)

"""Concurrent fan-out of independent recipe variants.

Join policy: all variants run to completion together; a variant that raises
or produces an invalid record is dropped, the survivors keep their original
order, and the batch only fails when nothing valid is left.
"""

import asyncio
import uuid
from typing import Awaitable, Callable, List, Tuple, TypeVar

from pantry_ai.models.models import Recipe, VariantBatch
from pantry_ai.pipeline.normalizer import is_valid_recipe
from pantry_ai.utils.errors import BatchGenerationError
from pantry_ai.utils.logger import logger

T = TypeVar("T")


async def run_variants(
    count: int,
    produce: Callable[[int], Awaitable[T]],
    is_valid: Callable[[T], bool],
) -> List[Tuple[int, T]]:
    """Run ``produce(1..count)`` concurrently and keep the valid results.

    Args:
        count: Number of variants to start.
        produce: Coroutine factory taking the 1-based variant index.
        is_valid: Predicate applied to every result that did not raise.

    Returns:
        List of (variant_index, result) pairs in index order, never empty.

    Raises:
        BatchGenerationError: If no variant produced a valid result.
    """
    indices = list(range(1, count + 1))
    outcomes = await asyncio.gather(*(produce(i) for i in indices), return_exceptions=True)

    valid: List[Tuple[int, T]] = []
    failures = {}
    for index, outcome in zip(indices, outcomes):
        if isinstance(outcome, BaseException):
            # CancelledError is not a variant failure; let it propagate
            if isinstance(outcome, asyncio.CancelledError):
                raise outcome
            failures[index] = str(outcome) or type(outcome).__name__
            logger.warning(f"Variant {index}/{count} failed: {failures[index]}", extra={"variant_index": index})
        elif not is_valid(outcome):
            failures[index] = "invalid result"
            logger.warning(f"Variant {index}/{count} produced an invalid result", extra={"variant_index": index})
        else:
            valid.append((index, outcome))

    if not valid:
        logger.error(f"All {count} variants failed")
        raise BatchGenerationError(details={"requested_count": count, "failures": failures})

    return valid


async def generate_recipe_batch(count: int, produce: Callable[[int], Awaitable[Recipe]]) -> VariantBatch:
    """Generate ``count`` recipe variants that share one family id.

    Args:
        count: Number of variants requested (>= 1).
        produce: Coroutine factory building the recipe for a 1-based index.

    Returns:
        VariantBatch: Valid recipes tagged with ``family_id`` and their original index.
    """
    family_id = uuid.uuid4().hex
    survivors = await run_variants(count, produce, is_valid_recipe)

    results = [
        recipe.model_copy(update={"family_id": family_id, "variant_index": index}) for index, recipe in survivors
    ]
    logger.info(
        f"Generated {len(results)}/{count} recipe variants",
        extra={"family_id": family_id},
    )
    return VariantBatch(family_id=family_id, requested_count=count, results=results)

"""Pantry item services: suggestions, quick defaults and photo detection.

Each service wires the same stages: build the prompt, invoke the model,
extract the payload, normalize it. They differ in how failures are handled:
suggestions and detection raise ExtractionError when nothing usable comes
back, while quick defaults always fall back to keyword-based defaults.
"""

from datetime import datetime
from typing import List, Optional, Union

from pantry_ai.llm.gemini import ModelInvoker
from pantry_ai.llm.images import prepare_image
from pantry_ai.models.models import (
    ConfidenceResult,
    DetectedItem,
    GenerationRequest,
    ImageAttachment,
    Intent,
    PantryDefaults,
)
from pantry_ai.pipeline.confidence import classify
from pantry_ai.pipeline.extractor import PayloadShape, extract_payload
from pantry_ai.pipeline.fallbacks import default_pantry_defaults
from pantry_ai.pipeline.normalizer import (
    normalize_detected_items,
    normalize_pantry_defaults,
    normalize_suggestion_result,
)
from pantry_ai.prompts.prompts import build_prompt
from pantry_ai.utils.config import config
from pantry_ai.utils.errors import ExtractionError, safe_execute_async
from pantry_ai.utils.logger import logger


async def suggest_pantry_item(item_name: str, invoker: ModelInvoker) -> ConfidenceResult:
    """Turn a vague item name into tiered pantry suggestions.

    Args:
        item_name: What the user typed, e.g. "chocolate".
        invoker: Model client.

    Returns:
        ConfidenceResult: accept / choose / specify with matching suggestions.

    Raises:
        ExtractionError: If the model reply holds no usable object.
        Exception: Model invocation errors propagate unchanged.
    """
    request = GenerationRequest(intent=Intent.ITEM_SUGGESTION, seed=item_name)
    log_extra = {"intent": request.intent.value}

    text = await invoker.invoke(build_prompt(request))
    extraction = extract_payload(text, PayloadShape.OBJECT)
    candidate = normalize_suggestion_result(extraction.payload)
    if candidate is None:
        logger.error(f"Item suggestion for '{request.seed}' unusable: {extraction.error}", extra=log_extra)
        raise ExtractionError(details={"intent": request.intent.value, "reason": extraction.error})

    result = classify(candidate)
    logger.info(
        f"Suggested '{result.action.value}' for '{request.seed}' "
        f"(confidence {result.confidence:.2f}, {len(result.suggestions)} suggestions)",
        extra=log_extra,
    )
    return result


async def get_quick_defaults(item_name: str, invoker: Optional[ModelInvoker] = None) -> PantryDefaults:
    """Storage location and expiry window for a new pantry item.

    Never fails on model problems: without an invoker, on invocation errors or
    on an unusable reply the keyword fallback is returned instead.
    """
    request = GenerationRequest(intent=Intent.QUICK_DEFAULTS, seed=item_name)
    log_extra = {"intent": request.intent.value}

    if invoker is None:
        return default_pantry_defaults(request.seed)

    text = await safe_execute_async(
        invoker.invoke(build_prompt(request)),
        f"Quick defaults model call for '{request.seed}'",
        log_level="warning",
    )
    if text is None:
        return default_pantry_defaults(request.seed)

    extraction = extract_payload(text, PayloadShape.OBJECT)
    if extraction.failed:
        logger.warning(
            f"Quick defaults for '{request.seed}' fell back to keyword rules: {extraction.error}",
            extra=log_extra,
        )
    return normalize_pantry_defaults(extraction.payload, request.seed)


async def detect_items_from_image(
    image: Union[ImageAttachment, bytes, str],
    invoker: ModelInvoker,
    mime_type: Optional[str] = None,
    now: Optional[datetime] = None,
) -> List[DetectedItem]:
    """Detect food items in a photo.

    Args:
        image: Prepared attachment, raw bytes, base64 string or data URL.
        invoker: Model client.
        mime_type: Declared MIME type for raw uploads.
        now: Reference time for computing ``expires_at``.

    Returns:
        List of detected items at or above MIN_DETECTION_CONFIDENCE (may be empty).

    Raises:
        ImageValidationError: If the image is rejected before the model call.
        ExtractionError: If the model reply holds no usable array.
    """
    attachment = image if isinstance(image, ImageAttachment) else prepare_image(image, mime_type)
    request = GenerationRequest(intent=Intent.IMAGE_DETECTION)
    log_extra = {"intent": request.intent.value}

    text = await invoker.invoke(build_prompt(request), attachment)
    extraction = extract_payload(text, PayloadShape.ANY)
    items = normalize_detected_items(extraction.payload, now=now)
    if items is None:
        logger.error(f"Image detection unusable: {extraction.error or 'no item array'}", extra=log_extra)
        raise ExtractionError(details={"intent": request.intent.value, "reason": extraction.error})

    kept = [item for item in items if item.confidence >= config.MIN_DETECTION_CONFIDENCE]
    if len(kept) < len(items):
        logger.debug(
            f"Dropped {len(items) - len(kept)} detections below confidence {config.MIN_DETECTION_CONFIDENCE}",
            extra=log_extra,
        )
    logger.info(f"Detected {len(kept)} items in image", extra=log_extra)
    return kept

"""LLM helpers (LangChain): deal scoring, offer summaries, reply drafts and CSV field mapping."""

import os
import json
import time
from langchain_anthropic import ChatAnthropic
from langchain_openai import ChatOpenAI
from estatepulse.models.csv_import import EntityType, ParsedRow
from estatepulse.models.listing import AIScore, Listing
from estatepulse.models.offer import Offer
from estatepulse.models.thread import Thread
from estatepulse.services.import_configs import get_import_config
from estatepulse.utils.errors import AIServiceError
from estatepulse.utils.ids import utc_now_iso
from estatepulse.utils.logging import get_structured_logger, get_correlation_id

logger = get_structured_logger(__name__)

SUMMARY_FALLBACK = "Summary unavailable."
DRAFT_FALLBACK = "Drafting failed."
THREAD_CONTEXT_MESSAGES = 5


def get_llm_model():
    """Get configured LLM model."""
    provider = os.environ.get("LLM_PROVIDER", "anthropic").lower()
    model_name = os.environ.get("LLM_MODEL", "claude-sonnet-4-20250514")

    logger.debug(
        "Getting LLM model",
        llm_provider=provider,
        llm_model=model_name
    )

    if provider == "anthropic":
        api_key = os.environ.get("ANTHROPIC_API_KEY")
        if not api_key:
            raise AIServiceError("ANTHROPIC_API_KEY not set")
        return ChatAnthropic(model=model_name, api_key=api_key)
    elif provider == "openai":
        api_key = os.environ.get("OPENAI_API_KEY")
        if not api_key:
            raise AIServiceError("OPENAI_API_KEY not set")
        return ChatOpenAI(model=model_name, api_key=api_key)
    else:
        raise AIServiceError(f"Unsupported LLM provider: {provider}")


def _response_text(response) -> str:
    content = response.content if hasattr(response, "content") else response
    if isinstance(content, list):
        # Anthropic may return content blocks
        content = "".join(
            block.get("text", "") if isinstance(block, dict) else str(block)
            for block in content
        )
    return str(content or "").strip()


def extract_json(content: str, opening: str = "{", closing: str = "}"):
    """Pull the outermost JSON object (or array) out of a model reply."""
    start_idx = content.find(opening)
    end_idx = content.rfind(closing) + 1
    if start_idx < 0 or end_idx <= start_idx:
        raise AIServiceError("No JSON found in LLM response")
    try:
        return json.loads(content[start_idx:end_idx])
    except json.JSONDecodeError as e:
        raise AIServiceError(f"Failed to parse LLM response: {e}")


def build_score_prompt(listing: Listing, notes: str = "") -> str:
    return f"""Evaluate this real estate deal:
Address: {listing.address}
Price: {listing.price}
Status: {listing.status.value}
Notes: {notes}

Return a score (0-100), a short explanation, a list of risks and the urgency of the deal (Low, Medium or High)."""


async def score_deal(listing: Listing, notes: str = "") -> AIScore:
    """Score a listing 0-100 with an explanation, risks and urgency."""
    prompt = build_score_prompt(listing, notes)
    model = get_llm_model()
    start = time.time()

    try:
        structured_llm = model.with_structured_output(AIScore)
        result = await structured_llm.ainvoke(prompt)
        score = result if isinstance(result, AIScore) else AIScore(**result)
    except AttributeError:
        # Model without structured output support: parse JSON from text
        response = await model.ainvoke(prompt)
        try:
            score = AIScore(**extract_json(_response_text(response)))
        except ValueError as e:
            raise AIServiceError(f"Invalid deal score: {e}")

    logger.info(
        "Deal scored",
        correlation_id=get_correlation_id(),
        listing_id=listing.id,
        score=score.score,
        urgency=score.urgency,
        llm_latency_ms=round((time.time() - start) * 1000, 2),
    )
    return score.model_copy(update={"last_updated": utc_now_iso()})


async def summarize_offer(offer: Offer, listing: Listing) -> str:
    """Two-sentence summary of deal quality and risks."""
    prompt = f"""Summarize this offer:
Buyer: {offer.buyer_name}
Amount: {offer.price}
Listing Price: {listing.price}
Financing: {offer.financing.value}

Provide a 2-sentence summary of deal quality and risks."""

    try:
        response = await get_llm_model().ainvoke(prompt)
    except Exception as e:
        logger.warning("Offer summary failed", offer_id=offer.id, error=str(e))
        return SUMMARY_FALLBACK
    return _response_text(response) or SUMMARY_FALLBACK


async def draft_response(thread: Thread, current_user: str) -> str:
    """Suggest a brief follow-up message for a thread."""
    context = "\n".join(
        f"{message.sender_id}: {message.text}"
        for message in thread.messages[-THREAD_CONTEXT_MESSAGES:]
    )
    prompt = f"""Thread context:
{context}

You are agent {current_user}. Draft a professional, friendly, and brief follow-up message to suggest the next steps."""

    try:
        response = await get_llm_model().ainvoke(prompt)
    except Exception as e:
        logger.warning("Reply drafting failed", thread_id=thread.id, error=str(e))
        return DRAFT_FALLBACK
    return _response_text(response) or DRAFT_FALLBACK


def build_mapping_prompt(rows: list[ParsedRow], target_keys: list[str], entity_type: EntityType) -> str:
    return f"""You clean spreadsheet rows for a real estate CRM before they are imported as {entity_type.value}.
For every input row, return one JSON object using only these keys: {", ".join(target_keys)}.
Copy values from whichever input column holds them, whatever the column is called. Leave a key out when no column holds it.
Never invent values. Lists (tags, contingencies) may be JSON arrays of strings.
Return a JSON array with exactly {len(rows)} objects, in the same order as the input, and nothing else.

Rows:
{json.dumps(rows, ensure_ascii=False)}"""


async def map_rows(rows: list[ParsedRow], entity_type: EntityType) -> list[dict]:
    """
    Ask the model to re-key a batch of rows onto the entity's canonical keys.

    Raises AIServiceError when the model is not configured or the reply is not
    a JSON array of objects. Callers decide what to do with length mismatches.
    """
    config = get_import_config(entity_type)
    prompt = build_mapping_prompt(rows, config.ai_target_keys, config.entity_type)

    response = await get_llm_model().ainvoke(prompt)
    mapped = extract_json(_response_text(response), "[", "]")
    if not isinstance(mapped, list) or not all(isinstance(item, dict) for item in mapped):
        raise AIServiceError("LLM mapping response is not a list of objects")
    return mapped

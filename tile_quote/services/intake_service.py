"""
Intake Service — turns the text-interpretation collaborator's JSON output
into a priced QuotationDocument.

The collaborator is untrusted: its numbers are coerced, its missing
defaults are filled from the profile, and its line prices go through the
same resolver as everything else (a price it states explicitly counts as a
caller override).
"""

from __future__ import annotations

import json
import logging
from typing import Any, Mapping, Union

from tile_quote.models.schemas import QuotationDocument
from tile_quote.pricing.profile import ConfigurationProfile
from tile_quote.services.quote_service import QuoteService

logger = logging.getLogger(__name__)


def _strip_code_fences(text: str) -> str:
    return text.replace("```json", "").replace("```", "").strip()


def parse_payload_text(text: str) -> dict[str, Any]:
    """Decode the collaborator's response body; raises ValueError if it is not a JSON object."""
    clean_json = _strip_code_fences(text)
    try:
        data = json.loads(clean_json)
    except json.JSONDecodeError as e:
        logger.error(f"Collaborator payload is not valid JSON: {e}")
        raise ValueError(f"Payload is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ValueError(f"Payload must be a JSON object, got {type(data).__name__}")
    return data


def parse_collaborator_payload(
    payload: Union[str, Mapping[str, Any]],
    profile: ConfigurationProfile,
) -> QuotationDocument:
    """Build and price a quotation from a collaborator payload (JSON text or mapping)."""
    data = parse_payload_text(payload) if isinstance(payload, str) else dict(payload)

    # Defaults the collaborator is expected to apply but may omit
    if data.get("workmanshipRate") is None and data.get("workmanship_rate") is None:
        data["workmanship_rate"] = profile.default_workmanship_rate
    if data.get("maintenance") is None:
        data["maintenance"] = profile.default_maintenance
    if "depositPercentage" not in data and "deposit_percentage" not in data:
        data["deposit_percentage"] = profile.default_deposit_percentage

    # Prices stated by the collaborator are caller overrides
    if isinstance(data.get("tiles"), list):
        data["tiles"] = [
            {k: v for k, v in line.items() if k not in ("priceSource", "price_source")}
            if isinstance(line, dict) else line
            for line in data["tiles"]
        ]

    # Everything else (ids, dates, client details) is owned by the caller
    for key in ("id", "date", "status", "invoiceId", "invoice_id"):
        data.pop(key, None)

    document = QuotationDocument.model_validate(data)
    priced = QuoteService(profile).price_document(document)
    logger.info(
        f"Parsed collaborator payload: {len(priced.tiles)} tiles, "
        f"{len(priced.materials)} materials, {len(priced.adjustments)} adjustments"
    )
    return priced

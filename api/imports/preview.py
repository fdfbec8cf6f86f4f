"""CSV import preview endpoint: parse and normalize a file without saving anything."""

import asyncio
from estatepulse.services.csv_importer import build_preview
from estatepulse.utils.errors import ImportStructureError
from estatepulse.utils.http import json_response, parse_json_body, request_correlation_id
from estatepulse.utils.logging import correlation_context, get_structured_logger
from estatepulse.utils.logging_config import LoggingConfig

LoggingConfig.setup_logging()
logger = get_structured_logger(__name__)


def handler(request):
    """
    Build an import preview.

    Body: {"csv": "<text>", "entity_type": "listings", "aliases": {...}, "use_ai": false}
    422 when the file cannot be imported at all (no data, no expected column,
    unknown entity type).
    """
    with correlation_context(request_correlation_id(request)) as correlation_id:
        try:
            body = parse_json_body(request)
            csv_text = body.get("csv")
            entity_type = body.get("entity_type")
            if not csv_text or not entity_type:
                return json_response(400, {"error": "csv and entity_type are required"})

            preview = asyncio.run(build_preview(
                csv_text,
                entity_type,
                aliases=body.get("aliases"),
                use_ai=body.get("use_ai"),
            ))
            return json_response(200, {"ok": True, "preview": preview.model_dump(mode="json")})

        except ImportStructureError as e:
            logger.warning("CSV import rejected", correlation_id=correlation_id, error=str(e))
            return json_response(422, {"error": str(e)})
        except ValueError as e:
            return json_response(400, {"error": str(e)})
        except Exception as e:
            logger.error("Error building import preview", correlation_id=correlation_id, error=str(e), exc_info=True)
            return json_response(500, {"error": str(e)})

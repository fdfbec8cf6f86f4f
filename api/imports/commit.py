"""CSV import commit endpoint: persist a reviewed preview for an agency."""

import asyncio
from estatepulse.models.csv_import import ImportContext, ImportPreview
from estatepulse.services.csv_importer import commit_import
from estatepulse.utils.http import json_response, parse_json_body, request_correlation_id
from estatepulse.utils.logging import correlation_context, get_structured_logger, mask_user_id
from estatepulse.utils.logging_config import LoggingConfig

LoggingConfig.setup_logging()
logger = get_structured_logger(__name__)


def handler(request):
    """
    Commit a preview.

    Body: {"preview": {...}, "agency_id": "a1", "user_id": "u2"}
    Per-record storage failures do not fail the request; they are counted in
    the returned report.
    """
    with correlation_context(request_correlation_id(request)) as correlation_id:
        try:
            body = parse_json_body(request)
            agency_id = body.get("agency_id")
            user_id = body.get("user_id")
            if not body.get("preview") or not agency_id or not user_id:
                return json_response(400, {"error": "preview, agency_id and user_id are required"})

            preview = ImportPreview(**body["preview"])
            context = ImportContext(agency_id=agency_id, actor_user_id=user_id)

            logger.info(
                "Committing CSV import",
                correlation_id=correlation_id,
                agency_id=agency_id,
                user_id=mask_user_id(user_id),
                entity_type=preview.entity_type.value,
                drafts=len(preview.drafts),
            )
            report = asyncio.run(commit_import(preview, context))
            return json_response(200, {"ok": True, "report": report.model_dump(mode="json")})

        except ValueError as e:
            return json_response(400, {"error": str(e)})
        except Exception as e:
            logger.error("Error committing import", correlation_id=correlation_id, error=str(e), exc_info=True)
            return json_response(500, {"error": str(e)})

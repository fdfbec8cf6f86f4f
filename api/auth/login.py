"""Login endpoint: look a user up by email, provisioning an agent on first sight."""

import asyncio
from estatepulse.services.user_directory import resolve_user_by_email
from estatepulse.utils.http import json_response, parse_json_body, request_correlation_id
from estatepulse.utils.logging import correlation_context, get_structured_logger
from estatepulse.utils.logging_config import LoggingConfig

LoggingConfig.setup_logging()
logger = get_structured_logger(__name__)


def handler(request):
    with correlation_context(request_correlation_id(request)) as correlation_id:
        try:
            body = parse_json_body(request)
            email = (body.get("email") or "").strip()
            if not email:
                return json_response(400, {"error": "email is required"})

            user = asyncio.run(resolve_user_by_email(email))
            if user is None:
                return json_response(500, {"error": "could not resolve user"})
            return json_response(200, {"ok": True, "user": user.model_dump(mode="json")})

        except ValueError as e:
            return json_response(400, {"error": str(e)})
        except Exception as e:
            logger.error("Error during login", correlation_id=correlation_id, error=str(e), exc_info=True)
            return json_response(500, {"error": str(e)})

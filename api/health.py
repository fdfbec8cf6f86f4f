"""Health check endpoint."""

from http.server import BaseHTTPRequestHandler
import json
import os

SERVICE_NAME = "estatepulse-backend"


def health_payload() -> dict:
    """Service status plus which external collaborators are configured (no calls made)."""
    provider = os.environ.get("LLM_PROVIDER", "anthropic").lower()
    llm_key = "OPENAI_API_KEY" if provider == "openai" else "ANTHROPIC_API_KEY"
    return {
        "status": "ok",
        "service": SERVICE_NAME,
        "checks": {
            "supabase_configured": bool(
                os.environ.get("SUPABASE_URL") and os.environ.get("SUPABASE_SERVICE_ROLE_KEY")
            ),
            "llm_provider": provider,
            "llm_configured": bool(os.environ.get(llm_key)),
            "ai_field_mapping": os.environ.get("USE_AI_FIELD_MAPPING", "false").lower() == "true",
        },
    }


class handler(BaseHTTPRequestHandler):
    """Health check handler for Vercel serverless function."""

    def do_GET(self):
        self.send_response(200)
        self.send_header('Content-Type', 'application/json')
        self.end_headers()
        self.wfile.write(json.dumps(health_payload()).encode('utf-8'))

    def do_POST(self):
        """Same as GET."""
        self.do_GET()

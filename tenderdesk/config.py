import os
from typing import List

from dotenv import load_dotenv

load_dotenv()

LLM_GATEWAY_URL = os.environ.get("LLM_GATEWAY_URL", "https://ai.gateway.lovable.dev/v1")
LLM_MODEL = os.environ.get("LLM_MODEL", "google/gemini-2.5-flash")
LLM_REQUEST_TIMEOUT = float(os.environ.get("LLM_REQUEST_TIMEOUT", "120"))

DATABASE_URL = os.environ.get("DATABASE_URL", "sqlite:///./tenderdesk.db")

COLLAB_RELAY_URL = os.environ.get("COLLAB_RELAY_URL", "wss://demos.yjs.dev")
COLLAB_ROOM_PREFIX = "rfp-draft-"

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()


def get_gateway_api_key() -> str:
    api_key = os.environ.get("LLM_GATEWAY_API_KEY") or os.environ.get("LOVABLE_API_KEY")
    if not api_key:
        raise RuntimeError("LLM_GATEWAY_API_KEY environment variable is not set.")
    return api_key


def get_cors_origins() -> List[str]:
    raw = os.environ.get("CORS_ORIGINS", "*")
    return [origin.strip() for origin in raw.split(",") if origin.strip()]

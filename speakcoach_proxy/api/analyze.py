import logging
import orjson
from typing import Any, Dict, Optional

import httpx
from fastapi import APIRouter, Request

from ..core import config
from ..models.api_models import AnalyzeRequest, AnalyzeResponse
from ..services.errors import UpstreamError
from ..services.llm import openai_handler
from ..services.requests.prompts import compose_examiner_prompt
from ..utils.helpers import error_response, json_response

logger = logging.getLogger("SpeakCoachProxy.Routers.Analyze")
router = APIRouter()


def _as_text(value: Any) -> Optional[str]:
    if value is None or isinstance(value, str):
        return value
    return str(value)


def _load_payload(raw: bytes) -> Dict[str, Any]:
    # a missing or non-object body behaves like an empty one
    if not raw:
        return {}
    try:
        data = orjson.loads(raw)
    except orjson.JSONDecodeError:
        return {}
    return data if isinstance(data, dict) else {}


@router.post("/api/analyze", summary="IELTS speaking feedback for a transcript", tags=["Speaking"])
async def analyze_transcript(request: Request):
    try:
        req = AnalyzeRequest(**_load_payload(await request.body()))

        # only a string transcript counts; other fields are stringified
        transcript = req.transcript if isinstance(req.transcript, str) else ""
        if not transcript.strip():
            return error_response(400, "Missing transcript")

        api_key = config.OPENAI_API_KEY
        if not api_key:
            return error_response(500, "Missing OPENAI_API_KEY")

        prompt = compose_examiner_prompt(transcript, topic=_as_text(req.topic), question=_as_text(req.question))
        model = _as_text(req.model) or config.DEFAULT_ANALYSIS_MODEL
        api_url = openai_handler.build_responses_url(config.OPENAI_API_BASE_URL, config.OPENAI_RESPONSES_PATH)

        text = await openai_handler.create_response(prompt, model, api_key, api_url)
        return json_response(AnalyzeResponse(text=text).model_dump())

    except UpstreamError as e:
        return error_response(e.status_code, e.message)
    except httpx.HTTPError as e:
        logger.exception("OpenAI request failed")
        return error_response(500, str(e) or "Server error")
    except Exception as e:
        logger.exception("Analyze processing error")
        return error_response(500, str(e) or "Server error")

import logging

import httpx
from fastapi import APIRouter, Request

from ..core import config
from ..models.api_models import PronunciationResponse
from ..services.errors import UpstreamError
from ..services.voice import azure_handler
from ..utils.helpers import error_response, json_response
from ..utils.multipart import MissingBoundary, extract_boundary, parse_multipart

logger = logging.getLogger("SpeakCoachProxy.Routers.Pronounce")
router = APIRouter()


def _declared_length(request: Request) -> int:
    try:
        return int(request.headers.get("content-length", 0))
    except ValueError:
        return 0


@router.post("/api/pronounce", summary="Pronunciation assessment of an audio recording", tags=["Speaking"])
async def pronounce(request: Request):
    """
    multipart/form-data with a `referenceText` field and an `audio` file,
    forwarded to Azure Speech pronunciation assessment.
    """
    try:
        region = config.AZURE_SPEECH_REGION
        key = config.AZURE_SPEECH_KEY
        if not region or not key:
            return error_response(500, "Missing AZURE_SPEECH_REGION or AZURE_SPEECH_KEY")

        max_bytes = config.MAX_UPLOAD_SIZE_MB * 1024 * 1024
        too_large = f"Upload too large (max {config.MAX_UPLOAD_SIZE_MB} MB)"
        if _declared_length(request) > max_bytes:
            return error_response(413, too_large)

        body = await request.body()
        if len(body) > max_bytes:
            return error_response(413, too_large)

        form = parse_multipart(body, extract_boundary(request.headers.get("content-type")))

        reference_text = (form.fields.get("referenceText") or "").strip()
        if not reference_text:
            return error_response(400, "Missing referenceText")

        audio_file = form.files.get("audio")
        if audio_file is None or not audio_file.data:
            return error_response(400, "Missing audio file")

        logger.info(f"Pronounce request: audio '{audio_file.filename}' ({audio_file.media_type}, {len(audio_file.data)} bytes)")

        data = await azure_handler.assess_pronunciation(
            audio_bytes=audio_file.data,
            content_type=audio_file.media_type,
            reference_text=reference_text,
            region=region,
            api_key=key,
            language=config.PRONUNCIATION_LANGUAGE
        )
        overall, words = azure_handler.reshape_assessment(data)
        result = PronunciationResponse(overall=overall, words=words, raw=data)
        return json_response(result.model_dump(by_alias=True))

    except MissingBoundary as e:
        return error_response(400, str(e))
    except UpstreamError as e:
        return error_response(e.status_code, e.message, {"raw": e.payload})
    except httpx.HTTPError as e:
        logger.exception("Azure Speech request failed")
        return error_response(500, str(e) or "Server error")
    except Exception as e:
        logger.exception("Pronounce processing error")
        return error_response(500, str(e) or "Server error")

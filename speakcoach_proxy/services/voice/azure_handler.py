import base64
import logging
import orjson
from typing import Any, Dict, List, Tuple

from ...core.http_client import get_http_client
from ...models.api_models import PronunciationOverall, PronunciationWord
from ...utils.helpers import parse_json_or_empty
from ..errors import UpstreamError

logger = logging.getLogger("SpeakCoachProxy.Services.Voice.Azure")

DEFAULT_AUDIO_CONTENT_TYPE = "audio/webm;codecs=opus"


def build_assessment_header(reference_text: str) -> str:
    """Azure expects the pronunciation assessment config as base64-encoded JSON in a header."""
    pa_config = {
        "ReferenceText": reference_text,
        "GradingSystem": "HundredMark",
        "Granularity": "Word",
        "EnableMiscue": True,
    }
    return base64.b64encode(orjson.dumps(pa_config)).decode("ascii")


def build_recognition_url(region: str, language: str) -> str:
    # conversation endpoint also works for read-aloud
    return (
        f"https://{region}.stt.speech.microsoft.com/speech/recognition/conversation/"
        f"cognitiveservices/v1?language={language}&format=detailed"
    )


def reshape_assessment(data: Dict[str, Any]) -> Tuple[PronunciationOverall, List[PronunciationWord]]:
    """
    Pull word-level and overall scores from a detailed recognition result.
    Shape: NBest[0].Words = [{Word, Offset, Duration, PronunciationAssessment: {AccuracyScore, ErrorType}}]
    """
    nbest_list = data.get("NBest") or []
    nbest = nbest_list[0] if nbest_list and isinstance(nbest_list[0], dict) else {}

    words = []
    for w in nbest.get("Words") or []:
        if not isinstance(w, dict):
            continue
        pa = w.get("PronunciationAssessment") or {}
        words.append(PronunciationWord(
            word=w.get("Word") or "",
            accuracy=pa.get("AccuracyScore"),
            error_type=pa.get("ErrorType") or "None",
            offset=w.get("Offset"),
            duration=w.get("Duration"),
        ))

    pa = nbest.get("PronunciationAssessment") or {}
    overall = PronunciationOverall(
        accuracy_score=pa.get("AccuracyScore"),
        fluency_score=pa.get("FluencyScore"),
        completeness_score=pa.get("CompletenessScore"),
        pron_score=pa.get("PronScore"),
    )
    return overall, words


async def assess_pronunciation(
    audio_bytes: bytes,
    content_type: str,
    reference_text: str,
    region: str,
    api_key: str,
    language: str = "en-US"
) -> Dict[str, Any]:
    """
    Run Azure Speech pronunciation assessment on one recording.

    Returns the raw recognition JSON.

    Raises:
        UpstreamError: Azure answered with a non-2xx status
        httpx.HTTPError: transport failure
    """
    url = build_recognition_url(region, language)
    headers = {
        "Ocp-Apim-Subscription-Key": api_key,
        "Pronunciation-Assessment": build_assessment_header(reference_text),
        "Content-Type": content_type or DEFAULT_AUDIO_CONTENT_TYPE,
        "Accept": "application/json",
    }

    client = get_http_client()
    logger.info(f"Pronunciation assessment at {region} ({language}), {len(audio_bytes)} bytes of {headers['Content-Type']}")

    resp = await client.post(url, headers=headers, content=audio_bytes)
    data = parse_json_or_empty(resp.content)
    if not isinstance(data, dict):
        data = {}

    if not resp.is_success:
        message = data.get("error") or data.get("message") or "Azure Speech error"
        logger.error(f"Azure pronunciation assessment failed: {resp.status_code} - {message}")
        raise UpstreamError(resp.status_code, message, data)

    return data

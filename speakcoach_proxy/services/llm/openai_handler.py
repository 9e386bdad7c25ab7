import logging
from typing import Any, Dict, List

from ...core.http_client import get_http_client
from ...utils.helpers import parse_json_or_empty
from ..errors import UpstreamError

logger = logging.getLogger("SpeakCoachProxy.Services.LLM.OpenAI")

NO_OUTPUT_TEXT = "No output"


def build_responses_url(base_url: str, path: str) -> str:
    """Join base and path; a base that already points at /responses is used as-is."""
    base = (base_url or "").strip().rstrip("/")
    if base.endswith("/responses"):
        return base
    return f"{base}/{path.lstrip('/')}"


def extract_output_text(data: Dict[str, Any]) -> str:
    """
    Collect every output_text item of a Responses API result.
    Shape: output[].content[] = {"type": "output_text", "text": "..."}
    """
    texts: List[str] = []
    for output in data.get("output") or []:
        if not isinstance(output, dict):
            continue
        for content in output.get("content") or []:
            if isinstance(content, dict) and content.get("type") == "output_text":
                texts.append(content.get("text") or "")
    return "\n".join(texts) or NO_OUTPUT_TEXT


async def create_response(prompt: str, model: str, api_key: str, api_url: str) -> str:
    """
    Send one prompt to the OpenAI Responses API and return the output text.

    Raises:
        UpstreamError: upstream answered with a non-2xx status
        httpx.HTTPError: transport failure
    """
    client = get_http_client()
    logger.info(f"Requesting analysis from OpenAI {model} at {api_url}")

    resp = await client.post(
        api_url,
        headers={"Authorization": f"Bearer {api_key}", "Content-Type": "application/json"},
        json={"model": model, "input": prompt},
    )
    data = parse_json_or_empty(resp.content)

    if not resp.is_success:
        error = data.get("error") if isinstance(data, dict) else None
        message = (error.get("message") if isinstance(error, dict) else None) or "OpenAI error"
        logger.error(f"OpenAI responses failed: {resp.status_code} - {message}")
        raise UpstreamError(resp.status_code, message, data)

    text = extract_output_text(data if isinstance(data, dict) else {})
    logger.info(f"Analysis Result: {text[:100]}...")
    return text

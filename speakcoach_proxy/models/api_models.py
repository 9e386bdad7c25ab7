from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional


# --- /api/analyze ---

class AnalyzeRequest(BaseModel):
    # clients send loosely typed JSON; values are turned into text when used
    topic: Optional[Any] = None
    question: Optional[Any] = None
    transcript: Optional[Any] = None
    model: Optional[Any] = None
    model_config = {"extra": "ignore"}


class AnalyzeResponse(BaseModel):
    text: str


# --- /api/pronounce ---

# Azure values are passed through as received
class PronunciationWord(BaseModel):
    word: Any = ""
    accuracy: Optional[Any] = None
    error_type: Any = Field("None", alias="errorType")
    offset: Optional[Any] = None
    duration: Optional[Any] = None
    model_config = {"populate_by_name": True}


class PronunciationOverall(BaseModel):
    accuracy_score: Optional[Any] = Field(None, alias="accuracyScore")
    fluency_score: Optional[Any] = Field(None, alias="fluencyScore")
    completeness_score: Optional[Any] = Field(None, alias="completenessScore")
    pron_score: Optional[Any] = Field(None, alias="pronScore")
    model_config = {"populate_by_name": True}


class PronunciationResponse(BaseModel):
    overall: PronunciationOverall
    words: List[PronunciationWord]
    raw: Dict[str, Any]

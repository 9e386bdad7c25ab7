# -*- coding: utf-8 -*-
"""
Prompt templates sent to the LLM.
"""

from __future__ import annotations

from typing import Optional


def compose_examiner_prompt(transcript: str, topic: Optional[str] = None, question: Optional[str] = None) -> str:
    """
    Build the IELTS speaking examiner prompt for one student answer.
    The model is asked to answer in Vietnamese, formatted as Markdown.
    """
    return (
        "\n"
        "Act as an IELTS Speaking Examiner.\n"
        f"Topic: {topic or ''}\n"
        f"Question: {question or ''}\n"
        f"Student transcript: {transcript}\n"
        "\n"
        "Return in Vietnamese with Markdown:\n"
        "- Estimated Band (0-9) and short reason\n"
        "- Pronunciation notes (general)\n"
        "- Grammar mistakes (bullet list with corrections)\n"
        "- Vocabulary improvements (bullet list)\n"
        "- Better answer (sample)\n"
    ).strip()

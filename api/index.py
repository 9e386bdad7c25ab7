"""Serverless entry point: exposes the ASGI app for platforms that import api/index.py."""
import sys
import os
from pathlib import Path

project_root = Path(__file__).resolve().parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

os.environ.setdefault("LOG_LEVEL", "INFO")

from speakcoach_proxy.main import app

__all__ = ["app"]

from __future__ import annotations

"""Shared pytest fixtures and test environment defaults."""

import os
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

os.environ["WEALTH_LLM_PROVIDER"] = "groq"
os.environ["GROQ_API_KEY"] = "test-key"
os.environ.pop("OPENAI_API_KEY", None)
os.environ.setdefault("WEALTH_METRICS_ENABLED", "true")
os.environ.setdefault("WEALTH_CONTEXT_ITEMS", "2")
os.environ.setdefault("WEALTH_UPLOAD_MAX_BYTES", "10485760")

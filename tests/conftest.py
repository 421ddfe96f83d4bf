"""Pytest configuration and shared fakes.

The repository uses a flat `src/` layout. This conftest ensures tests can import from the `src.*`
namespace when running `pytest` locally without installing the package.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Ensure `import src...` works when running pytest without installing the package.
REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT))

from src.llm.client import LLMConfig  # noqa: E402

LLM_BASE = "https://llm.test/v1"
CATALOG_BASE = "https://catalog.test/backend"
STREAM_BASE = "https://stream.test/generate"


def llm_reply(content: str) -> dict:
    """Build an OpenAI-style chat completion body."""

    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


@pytest.fixture
def llm_config() -> LLMConfig:
    return LLMConfig(api_key="test-key", api_base=LLM_BASE, timeout_s=5.0)

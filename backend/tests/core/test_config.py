"""
Tests for Settings validation.
"""

import pytest
from pydantic import ValidationError

from dataroom.context_engine.rubrics import Perspective
from dataroom.core.config import Settings


def test_defaults():
    config = Settings(_env_file=None)
    assert config.RETRIEVAL_TOP_K == 20
    assert config.EMBEDDING_MODEL == "text-embedding-3-small"
    assert config.DEFAULT_PERSPECTIVE == Perspective.FOUNDER


def test_log_level_is_normalized():
    assert Settings(_env_file=None, LOG_LEVEL=" debug ").LOG_LEVEL == "DEBUG"


def test_perspective_from_string():
    config = Settings(_env_file=None, DEFAULT_PERSPECTIVE="acquirer_mna")
    assert config.DEFAULT_PERSPECTIVE == Perspective.ACQUIRER_MNA


def test_top_k_must_be_positive():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, RETRIEVAL_TOP_K=0)


def test_production_requires_openai_key(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    with pytest.raises(ValidationError, match="OPENAI_API_KEY"):
        Settings(_env_file=None, ENVIRONMENT="production", OPENAI_API_KEY="")

    assert Settings(_env_file=None, ENVIRONMENT="production", OPENAI_API_KEY="sk-live").ENVIRONMENT == "production"

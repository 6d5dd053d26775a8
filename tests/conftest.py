import sys
import os

import pytest

# Ensure the project root is in the python path for all tests
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from junapedia.matching.franchise_matcher import FranchiseMatcher
from junapedia.models.reference import FranchiseTable
from junapedia.pipeline.keys import CanonicalKeyBuilder


@pytest.fixture
def franchise_table():
    """Small explicit table so matching tests do not depend on the packaged data."""
    return FranchiseTable(
        {
            "mcdonalds": "McDonald's",
            "kfc": "KFC",
            "burger-king": "Burger King",
            "doggis": "Doggis",
            "lider": "Líder",
            "ab": "AB",
        },
        aliases={
            "kfc": ["kentucky fried chicken"],
            "mcdonalds": ["mc donalds", "mcdonald"],
        },
    )


@pytest.fixture
def matcher(franchise_table):
    return FranchiseMatcher(franchise_table)


@pytest.fixture
def key_builder(matcher):
    return CanonicalKeyBuilder(matcher)


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """No Supabase/OpenAI credentials and no stray .env in the working directory."""
    for var in (
        "SUPABASE_URL",
        "SUPABASE_SERVICE_ROLE_KEY",
        "SUPABASE_ANON_KEY",
        "SUPABASE_TABLE",
        "OPENAI_API_KEY",
        "OPENAI_KEY",
        "CONFIRM",
    ):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path

import os
import uuid
from datetime import date

import pytest

# Run offline: no Redis, no LLM
os.environ["REDIS_URL"] = ""
os.environ["GROQ_API_KEY"] = ""

# A Monday
TODAY = date(2026, 10, 19)


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def user_id():
    return f"user-{uuid.uuid4().hex[:8]}"

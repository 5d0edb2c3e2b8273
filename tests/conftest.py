"""Shared fixtures for tests."""
import json
import pytest
from datetime import datetime, timedelta

from chat_search.corpus import InMemoryCorpus
from chat_search.models import Conversation, Message
from chat_search.search import SearchEngine


BASE_TIME = datetime(2024, 5, 1, 12, 0, 0)


def make_conversation(conv_id, title, minutes=0, **kwargs):
    created = BASE_TIME + timedelta(minutes=minutes)
    return Conversation(id=conv_id, title=title, created_at=created, updated_at=created, **kwargs)


def make_message(msg_id, conv_id, text, minutes=0, role="user"):
    return Message(
        id=msg_id,
        conversation_id=conv_id,
        text=text,
        created_at=BASE_TIME + timedelta(minutes=minutes),
        role=role,
    )


@pytest.fixture
def sample_conversations():
    return [
        make_conversation("c1", "Trip Planning"),
        make_conversation("c2", "Python Project", minutes=10),
        make_conversation("c3", "Empty Chat", minutes=20),
    ]


@pytest.fixture
def sample_messages():
    return [
        make_message("m1", "c1", "Let's plan our trip to Paris", minutes=1),
        make_message("m2", "c1", "Paris has great museums", minutes=2, role="assistant"),
        make_message("m3", "c2", "The project needs a faster search process", minutes=11),
        make_message("m4", "c2", "Our project uses a keyword search engine", minutes=12, role="assistant"),
    ]


@pytest.fixture
def corpus(sample_conversations, sample_messages):
    return InMemoryCorpus(sample_conversations, sample_messages)


@pytest.fixture
def engine(corpus):
    return SearchEngine(corpus)


@pytest.fixture
def data_dir(tmp_path, sample_conversations, sample_messages):
    """Write the sample corpus as conversations.json / messages.json."""
    (tmp_path / "conversations.json").write_text(
        json.dumps({c.id: c.to_dict() for c in sample_conversations}, indent=2)
    )
    (tmp_path / "messages.json").write_text(
        json.dumps({m.id: m.to_dict() for m in sample_messages}, indent=2)
    )
    return tmp_path


@pytest.fixture
def db_path(tmp_path):
    """Return path for a temporary conversation database."""
    return tmp_path / "test_conversations.db"

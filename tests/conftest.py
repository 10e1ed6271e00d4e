"""Shared test fixtures for pls-editor."""

from pathlib import Path

import pytest

from pls_editor import EditSession, InMemoryStorageGateway

FIXTURES = Path(__file__).parent / "fixtures"

SIMPLE_XML = (
    '<lexicon xml:lang="en-GB"><lexeme><grapheme>hello</grapheme>'
    "<phoneme>/həˈloʊ/</phoneme></lexeme></lexicon>"
)


@pytest.fixture
def sample_xml():
    """Hand-authored PLS document with three lexemes."""
    return (FIXTURES / "sample.xml").read_text(encoding="utf-8")


@pytest.fixture
def gateway(sample_xml):
    """In-memory storage holding two lexicon blobs."""
    return InMemoryStorageGateway({
        "sample.xml": sample_xml,
        "simple.xml": SIMPLE_XML,
    })


@pytest.fixture
def session(gateway):
    """Empty session over the in-memory gateway."""
    return EditSession(gateway)


@pytest.fixture
def loaded_session(session):
    """Session with sample.xml open."""
    session.open("sample.xml")
    return session

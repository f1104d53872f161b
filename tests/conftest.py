"""
Shared fixtures for revision_compare tests.
"""

import asyncio
from typing import Dict, List, Optional, Union

import pytest

from revision_compare.core.errors import CollaboratorFailure
from revision_compare.models.similarity import SimilarMatch


class FakeMatcher:
    """Canned semantic matcher keyed by selected text.

    A gate (asyncio.Event) registered for a selection holds that response back
    until the test releases it.
    """

    def __init__(self, responses: Optional[Dict[str, Union[SimilarMatch, Exception]]] = None):
        self.responses = responses or {}
        self.gates: Dict[str, asyncio.Event] = {}
        self.calls: List[str] = []

    async def find_similar(self, source_text: str, target_text: str, selected_text: str) -> SimilarMatch:
        self.calls.append(selected_text)
        gate = self.gates.get(selected_text)
        if gate is not None:
            await gate.wait()
        result = self.responses.get(selected_text)
        if isinstance(result, Exception):
            raise result
        if result is None:
            raise CollaboratorFailure("no canned response")
        return result


@pytest.fixture
def fake_matcher() -> FakeMatcher:
    return FakeMatcher()

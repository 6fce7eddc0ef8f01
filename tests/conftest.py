"""Shared pytest fixtures."""

import logging

import pytest

from infrachat.session.reducer import EventReducer
from infrachat.session.state import SessionContext


@pytest.fixture(autouse=True)
def _enable_logging():
    logging.disable(logging.NOTSET)
    yield
    logging.disable(logging.NOTSET)


@pytest.fixture
def context():
    ctx = SessionContext()
    ctx.activate("sess-1")
    return ctx


@pytest.fixture
def reducer(context):
    return EventReducer(context)

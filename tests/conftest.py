"""Shared fixtures for LogShark tests."""

import pytest

from logshark.blobstore import MemoryBlobStore
from logshark.records import LogParser
from logshark.store import PartitionedStore
from tests.helpers import HEADER, MALFORMED_LINES, VALID_LINES


@pytest.fixture
def parser():
    return LogParser()


@pytest.fixture
def records(parser):
    return [parser.parse(line) for line in VALID_LINES]


@pytest.fixture
def store(records):
    s = PartitionedStore()
    for record in records:
        s.append(record)
    s.seal()
    return s


@pytest.fixture
def raw_lines():
    return [HEADER] + VALID_LINES[:9] + MALFORMED_LINES + VALID_LINES[9:]


@pytest.fixture
def blob_store(raw_lines):
    return MemoryBlobStore({"raw/access-01.csv": raw_lines})

"""Shared fixtures for pyreap tests."""

import pytest

from pyreap.models import ProcessRecord


@pytest.fixture
def make_record():
    """Factory building ProcessRecords with sensible defaults."""

    def _make_record(**overrides) -> ProcessRecord:
        fields = dict(
            command="/sbin/init splash",
            owner="root",
            parent_id="0",
            process_id="1",
            virtual_size_kb=167744,
            resident_size_kb=13060,
            cpu_percent=0.0,
            thread_count=1,
            state="Ss",
            elapsed_seconds=3600,
            cpu_time_seconds=62,
        )
        fields.update(overrides)
        return ProcessRecord(**fields)

    return _make_record

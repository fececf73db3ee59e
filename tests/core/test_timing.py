"""Tests for the section Timer."""

import logging

import pytest

from pyrepeatability.core.compute.timing import Timer


class TestTimer:

    def test_sections_reported(self):
        with Timer() as timer:
            with timer.section('bootstrap'):
                pass
            with timer.section('permutation'):
                pass
        result = timer.result()
        assert list(result) == ['total_seconds', 'bootstrap', 'permutation']
        assert result['total_seconds'] >= result['bootstrap']

    def test_start_stop(self):
        timer = Timer()
        timer.start()
        with timer.section('optimization'):
            pass
        timer.stop()
        assert 'optimization' in timer.result()

    def test_repeated_sections_accumulate(self):
        with Timer() as timer:
            for _ in range(3):
                with timer.section('lrt'):
                    pass
        assert set(timer.result()) == {'total_seconds', 'lrt'}

    def test_stopped_on_exception(self):
        timer = Timer()
        with pytest.raises(RuntimeError, match="boom"):
            with timer:
                with timer.section('point_estimate'):
                    raise RuntimeError("boom")
        assert 'point_estimate' in timer.result()

    def test_section_logged(self, caplog):
        with caplog.at_level(logging.DEBUG, logger='pyrepeatability.core.compute.timing'):
            with Timer() as timer:
                with timer.section('bootstrap'):
                    pass
        assert any('bootstrap finished' in r.message for r in caplog.records)

    def test_result_before_stop(self):
        timer = Timer()
        timer.start()
        with pytest.raises(RuntimeError):
            timer.result()

    def test_stop_before_start(self):
        with pytest.raises(RuntimeError):
            Timer().stop()

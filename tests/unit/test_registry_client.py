"""Tests for the single-flight font registry client."""

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest
from conftest import FakeFetcher, make_record

from fontica.client.registry import FontRegistryClient
from fontica.core.exceptions import (
    ClientClosedError,
    FontLoadError,
    FontParseError,
    InvalidStateTransition,
)
from fontica.core.models import LoadState


@pytest.fixture
def registry(fake_fetcher, fake_runtime):
    client = FontRegistryClient(fake_fetcher, fake_runtime, max_workers=4)
    yield client
    client.close()


class TestFontRegistryClient:
    """Test load states and single-flight loading."""

    def test_unknown_font_is_unloaded(self, registry):
        assert registry.get_state("Roboto") is LoadState.UNLOADED

    def test_track_registers_unloaded(self, registry):
        assert registry.track(make_record("Roboto")) is LoadState.UNLOADED
        assert registry.states() == {"Roboto": LoadState.UNLOADED}

    def test_successful_load(self, registry, fake_runtime):
        future = registry.ensure_loaded(make_record("Roboto"))

        assert future.result(timeout=5) is LoadState.LOADED
        assert registry.get_state("Roboto") is LoadState.LOADED
        assert fake_runtime.is_registered("Roboto")

    def test_concurrent_calls_share_one_load(self, fake_runtime):
        """Test many simultaneous callers cause exactly one fetch."""
        gate = threading.Event()
        fetcher = FakeFetcher(gate=gate)
        record = make_record("Roboto")

        with FontRegistryClient(fetcher, fake_runtime) as registry:
            with ThreadPoolExecutor(max_workers=8) as pool:
                futures = list(pool.map(lambda _: registry.ensure_loaded(record), range(16)))

            assert registry.get_state("Roboto") is LoadState.LOADING
            gate.set()

            assert all(future is futures[0] for future in futures)
            assert futures[0].result(timeout=5) is LoadState.LOADED
            assert fetcher.calls == ["/fonts/Roboto-Regular.ttf"]

    def test_loaded_font_is_not_fetched_again(self, registry, fake_fetcher):
        record = make_record("Roboto")
        registry.ensure_loaded(record).result(timeout=5)

        second = registry.ensure_loaded(record)

        assert second.result(timeout=5) is LoadState.LOADED
        assert len(fake_fetcher.calls) == 1

    def test_fetch_failure_marks_failed(self, fake_runtime):
        fetcher = FakeFetcher({"/fonts/Broken-Regular.ttf": OSError("connection reset")})

        with FontRegistryClient(fetcher, fake_runtime) as registry:
            future = registry.ensure_loaded(make_record("Broken"))

            with pytest.raises(FontLoadError, match="connection reset"):
                future.result(timeout=5)
            assert registry.get_state("Broken") is LoadState.FAILED

    def test_parse_failure_marks_failed(self, fake_runtime):
        fetcher = FakeFetcher({"/fonts/Corrupt-Regular.ttf": b"corrupt"})

        with FontRegistryClient(fetcher, fake_runtime) as registry:
            future = registry.ensure_loaded(make_record("Corrupt"))

            with pytest.raises(FontParseError):
                future.result(timeout=5)
            assert registry.get_state("Corrupt") is LoadState.FAILED
            assert not fake_runtime.is_registered("Corrupt")

    def test_failed_font_is_not_retried_automatically(self, fake_runtime):
        fetcher = FakeFetcher({"/fonts/Broken-Regular.ttf": OSError("boom")})

        with FontRegistryClient(fetcher, fake_runtime) as registry:
            record = make_record("Broken")
            first = registry.ensure_loaded(record)
            with pytest.raises(FontLoadError):
                first.result(timeout=5)

            assert registry.ensure_loaded(record) is first
            assert len(fetcher.calls) == 1

    def test_failure_is_isolated(self, fake_runtime):
        """Test one failing font does not affect the others."""
        fetcher = FakeFetcher({"/fonts/Broken-Regular.ttf": OSError("boom")})

        with FontRegistryClient(fetcher, fake_runtime) as registry:
            broken = registry.ensure_loaded(make_record("Broken"))
            good = registry.ensure_loaded(make_record("Roboto"))

            assert good.result(timeout=5) is LoadState.LOADED
            assert isinstance(broken.exception(timeout=5), FontLoadError)
            assert registry.states() == {
                "Broken": LoadState.FAILED,
                "Roboto": LoadState.LOADED,
            }

    def test_reload_after_failure(self, fake_runtime):
        """Test a retried font passes back through Loading before it is Loaded."""
        fetcher = FakeFetcher({"/fonts/Flaky-Regular.ttf": OSError("timeout")})

        with FontRegistryClient(fetcher, fake_runtime) as registry:
            record = make_record("Flaky")
            with pytest.raises(FontLoadError):
                registry.ensure_loaded(record).result(timeout=5)
            assert registry.get_state("Flaky") is LoadState.FAILED

            fetcher.responses.clear()
            gate = threading.Event()
            fetcher.gate = gate
            future = registry.reload("Flaky")

            assert registry.get_state("Flaky") is LoadState.LOADING
            assert not future.done()

            gate.set()
            assert future.result(timeout=5) is LoadState.LOADED
            assert registry.get_state("Flaky") is LoadState.LOADED
            assert len(fetcher.calls) == 2

    def test_reload_of_loaded_font_is_rejected(self, registry):
        registry.ensure_loaded(make_record("Roboto")).result(timeout=5)

        with pytest.raises(InvalidStateTransition):
            registry.reload("Roboto")

    def test_reload_of_unknown_font_is_rejected(self, registry):
        with pytest.raises(InvalidStateTransition):
            registry.reload("Nope")

    def test_closed_client_rejects_loads(self, registry):
        registry.close()

        assert registry.closed
        with pytest.raises(ClientClosedError):
            registry.ensure_loaded(make_record("Roboto"))

    def test_close_discards_in_flight_results(self, fake_runtime):
        """Test a load finishing after teardown leaves no state behind."""
        gate = threading.Event()
        fetcher = FakeFetcher(gate=gate)
        registry = FontRegistryClient(fetcher, fake_runtime)

        future = registry.ensure_loaded(make_record("Roboto"))
        registry.close()
        gate.set()

        assert future.result(timeout=5) is LoadState.LOADED
        assert registry.get_state("Roboto") is LoadState.LOADING

    def test_close_is_idempotent(self, registry):
        registry.close()
        registry.close()
        assert registry.closed

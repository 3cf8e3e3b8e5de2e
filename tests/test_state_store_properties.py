"""
Property-based tests for State Store module.

Uses Hypothesis to verify that the local state file round-trips, that any
unreadable file degrades to empty state, and that write failures never raise.
"""

import json
import os
import tempfile
from io import StringIO
from pathlib import Path

from hypothesis import given, settings
from hypothesis import strategies as st

from swinelink.audit_logger import AuditLogger
from swinelink.enums import LogLevel
from swinelink.models import LocalState
from swinelink.state_store import StateStore


# Strategies for generating valid test data

json_scalars = st.one_of(
    st.none(),
    st.booleans(),
    st.integers(min_value=-10**12, max_value=10**12),
    st.text(max_size=20),
)


@st.composite
def local_state_strategy(draw) -> LocalState:
    """Generate LocalState objects with any subset of fields set."""
    pricing = draw(st.one_of(
        st.none(),
        st.fixed_dictionaries({
            "status": st.just("SUCCESS"),
            "pricing": st.dictionaries(
                st.sampled_from(["com", "net", "org", "io", "co.uk"]),
                st.fixed_dictionaries({"registration": st.sampled_from(["9.99", "11.08"])}),
            ),
        }),
    ))
    extra = draw(st.dictionaries(
        st.text(alphabet="abcdefghijklmnopqrstuvwxyz", min_size=1, max_size=10).map(lambda k: "x_" + k),
        json_scalars,
        max_size=3,
    ))
    return LocalState(
        last_domain_check=draw(st.one_of(st.none(), st.integers(min_value=0, max_value=2 * 10**12))),
        domain_check_cooldown=draw(st.one_of(st.none(), st.integers(min_value=1, max_value=3600))),
        pricing_cache=pricing,
        pricing_cache_timestamp=draw(st.one_of(st.none(), st.integers(min_value=0, max_value=2 * 10**12))),
        pricing_cache_ttl=draw(st.one_of(st.none(), st.integers(min_value=1, max_value=120))),
        extra=extra,
    )


def _logger() -> AuditLogger:
    return AuditLogger(output_format="json", output_stream=StringIO(), level="debug")


class TestStateRoundTrip:
    """
    Property: state persistence round-trip.

    *For any* LocalState, writing it and reading it back SHALL produce an
    equivalent state, including keys the client does not know about.
    """

    @given(state=local_state_strategy())
    @settings(max_examples=100)
    def test_write_then_read(self, state: LocalState) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            store = StateStore(Path(tmpdir) / "state.json")
            assert store.write(state)
            assert store.read() == state

    def test_file_uses_camel_case_keys(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "state.json"
            store = StateStore(path)
            store.write(LocalState(
                last_domain_check=1000,
                domain_check_cooldown=10,
                pricing_cache={"pricing": {}},
                pricing_cache_timestamp=2000,
                pricing_cache_ttl=20,
            ))
            raw = json.loads(path.read_text(encoding="utf-8"))
            assert raw == {
                "lastDomainCheck": 1000,
                "domainCheckCooldown": 10,
                "pricingCache": {"pricing": {}},
                "pricingCacheTimestamp": 2000,
                "pricingCacheTTL": 20,
            }

    def test_unset_fields_are_omitted(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "state.json"
            StateStore(path).write(LocalState(last_domain_check=5))
            assert json.loads(path.read_text(encoding="utf-8")) == {"lastDomainCheck": 5}

    def test_write_creates_parent_directories(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "nested" / "dir" / "state.json"
            assert StateStore(path).write(LocalState(last_domain_check=1))
            assert path.exists()

    def test_no_temporary_files_left_behind(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            store = StateStore(Path(tmpdir) / "state.json")
            for i in range(3):
                store.write(LocalState(last_domain_check=i))
            assert os.listdir(tmpdir) == ["state.json"]


class TestUnreadableStateIsEmpty:
    """
    Property: reads never fail.

    *For any* missing, corrupt or non-object state file, read SHALL return
    empty state and SHALL NOT raise.
    """

    def test_missing_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            assert StateStore(Path(tmpdir) / "absent.json").read() == LocalState()

    @given(content=st.text(max_size=50))
    @settings(max_examples=100)
    def test_arbitrary_text(self, content: str) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "state.json"
            path.write_text(content, encoding="utf-8")
            state = StateStore(path, logger=_logger()).read()
            assert isinstance(state, LocalState)
            try:
                decoded = json.loads(content)
            except ValueError:
                decoded = None
            if not isinstance(decoded, dict):
                assert state == LocalState()

    @given(value=st.one_of(json_scalars, st.lists(st.integers(), max_size=3)))
    @settings(max_examples=50)
    def test_non_object_json(self, value) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "state.json"
            path.write_text(json.dumps(value), encoding="utf-8")
            assert StateStore(path).read() == LocalState()

    def test_wrongly_typed_fields_dropped(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "state.json"
            path.write_text(json.dumps({
                "lastDomainCheck": "yesterday",
                "domainCheckCooldown": True,
                "pricingCache": [1, 2],
                "pricingCacheTimestamp": 1000,
            }), encoding="utf-8")
            assert StateStore(path).read() == LocalState(pricing_cache_timestamp=1000)

    def test_corrupt_file_is_logged(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "state.json"
            path.write_text("{not json", encoding="utf-8")
            logger = _logger()
            StateStore(path, logger=logger).read()
            errors = [e for e in logger.entries if e.level is LogLevel.ERROR]
            assert len(errors) == 1
            assert errors[0].component == "state_store"


class TestWriteFailures:
    """Property: write failures are reported, never raised."""

    def test_unwritable_location_returns_false(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            blocker = Path(tmpdir) / "blocker"
            blocker.write_text("a regular file", encoding="utf-8")
            logger = _logger()
            store = StateStore(blocker / "state.json", logger=logger)
            assert store.write(LocalState(last_domain_check=1)) is False
            assert any(e.level is LogLevel.ERROR for e in logger.entries)

    def test_update_returns_state_even_when_write_fails(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            blocker = Path(tmpdir) / "blocker"
            blocker.write_text("a regular file", encoding="utf-8")
            store = StateStore(blocker / "state.json")

            def mutate(state: LocalState) -> None:
                state.last_domain_check = 42

            assert store.update(mutate).last_domain_check == 42


class TestUpdate:
    """
    Property: read-modify-write keeps unrelated fields.

    *For any* stored state, an update touching one field SHALL leave all other
    fields as they were.
    """

    @given(state=local_state_strategy(), checked_at=st.integers(min_value=0, max_value=10**13))
    @settings(max_examples=100)
    def test_update_preserves_other_fields(self, state: LocalState, checked_at: int) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            store = StateStore(Path(tmpdir) / "state.json")
            store.write(state)

            def mutate(s: LocalState) -> None:
                s.last_domain_check = checked_at

            store.update(mutate)
            reloaded = store.read()
            assert reloaded.last_domain_check == checked_at
            assert reloaded.pricing_cache == state.pricing_cache
            assert reloaded.pricing_cache_timestamp == state.pricing_cache_timestamp
            assert reloaded.domain_check_cooldown == state.domain_check_cooldown
            assert reloaded.extra == state.extra

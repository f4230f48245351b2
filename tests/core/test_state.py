"""Tests for state.py - the activity registry and per-type rollups."""

import random

import pytest

from buildstatus.errors import DuplicateActivity, InvalidResultFields, UnknownActivity
from buildstatus.models import ActivityType, ResultType
from buildstatus.state import ProgressState, get_int, get_string


def _snapshot(state: ProgressState) -> dict:
    """Comparable view of everything a stop/start can change."""
    return {
        "order": list(state.activities),
        "rollups": {
            t: (sorted(r.live), r.carried_done, r.carried_expected, r.carried_failed)
            for t, r in state.by_type.items()
        },
        "scalars": (
            state.files_linked,
            state.bytes_linked,
            state.corrupted_paths,
            state.untrusted_paths,
        ),
    }


class TestStartStop:
    """Tests for activity creation and removal."""

    def test_start_indexes_by_id_and_type(self):
        state = ProgressState()
        activity = state.start(1, ActivityType.BUILD, "pkgA")
        assert state.get(1) is activity
        assert state.rollup(ActivityType.BUILD).live == {1: activity}
        assert list(state.activities) == [1]

    def test_start_appends_to_end(self):
        state = ProgressState()
        state.start(1, ActivityType.BUILD, "a")
        state.start(2, ActivityType.DOWNLOAD, "b")
        assert list(state.activities) == [1, 2]

    def test_duplicate_start_raises(self):
        """Reusing a live id is a producer bug and must fail loudly."""
        state = ProgressState()
        state.start(1, ActivityType.BUILD, "a")
        before = _snapshot(state)
        with pytest.raises(DuplicateActivity) as exc_info:
            state.start(1, ActivityType.DOWNLOAD, "b")
        assert exc_info.value.activity_id == 1
        assert _snapshot(state) == before
        assert state.get(1).label == "a"

    def test_id_reusable_after_stop(self):
        state = ProgressState()
        state.start(1, ActivityType.BUILD, "a")
        state.stop(1)
        state.start(1, ActivityType.BUILD, "again")
        assert state.get(1).label == "again"

    def test_stop_folds_counters(self):
        state = ProgressState()
        state.start(1, ActivityType.BUILD, "a")
        state.progress(1, done=3, expected=5, running=1, failed=2)
        state.stop(1)
        rollup = state.rollup(ActivityType.BUILD)
        assert rollup.carried_done == 3
        assert rollup.carried_failed == 2
        assert rollup.live == {}
        assert not state.is_live(1)

    def test_stop_unknown_is_noop(self):
        state = ProgressState()
        state.start(1, ActivityType.BUILD, "a")
        before = _snapshot(state)
        assert state.stop(99) is None
        assert _snapshot(state) == before

    def test_stop_is_idempotent(self):
        state = ProgressState()
        state.start(1, ActivityType.BUILD, "a")
        state.progress(1, done=2, expected=2)
        state.set_expected(1, ActivityType.DOWNLOAD, 100)
        state.stop(1)
        once = _snapshot(state)
        state.stop(1)
        assert _snapshot(state) == once


class TestProgress:
    """Tests for counter updates."""

    def test_progress_overwrites_counters(self):
        state = ProgressState()
        state.start(1, ActivityType.BUILD, "a")
        state.progress(1, 1, 4, 2, 1)
        state.progress(1, done=2, expected=4)
        activity = state.get(1)
        assert (activity.done, activity.expected) == (2, 4)
        assert (activity.running, activity.failed) == (0, 0)

    def test_progress_unknown_raises(self):
        state = ProgressState()
        with pytest.raises(UnknownActivity) as exc_info:
            state.progress(7, done=1)
        assert exc_info.value.activity_id == 7

    def test_progress_does_not_reorder(self):
        state = ProgressState()
        state.start(1, ActivityType.BUILD, "a")
        state.start(2, ActivityType.BUILD, "b")
        state.progress(1, done=1)
        assert list(state.activities) == [1, 2]


class TestSetExpected:
    """set_expected contributions are replaced and reversed, never leaked."""

    def test_contribution_added(self):
        state = ProgressState()
        state.start(2, ActivityType.DOWNLOAD, "")
        state.set_expected(2, ActivityType.DOWNLOAD, 1000)
        assert state.rollup(ActivityType.DOWNLOAD).carried_expected == 1000

    def test_second_call_replaces_contribution(self):
        state = ProgressState()
        state.start(2, ActivityType.DOWNLOAD, "")
        state.set_expected(2, ActivityType.DOWNLOAD, 1000)
        state.set_expected(2, ActivityType.DOWNLOAD, 400)
        assert state.rollup(ActivityType.DOWNLOAD).carried_expected == 400

    def test_stop_reverses_contribution(self):
        state = ProgressState()
        state.start(2, ActivityType.DOWNLOAD, "")
        state.set_expected(2, ActivityType.DOWNLOAD, 1000)
        state.stop(2)
        assert state.rollup(ActivityType.DOWNLOAD).carried_expected == 0

    def test_contribution_to_other_type(self):
        """A realise activity declares how many builds to expect."""
        state = ProgressState()
        state.start(1, ActivityType.REALISE, "")
        state.start(2, ActivityType.REALISE, "")
        state.set_expected(1, ActivityType.BUILDS, 5)
        state.set_expected(2, ActivityType.BUILDS, 3)
        assert state.rollup(ActivityType.BUILDS).carried_expected == 8
        state.stop(1)
        assert state.rollup(ActivityType.BUILDS).carried_expected == 3
        assert state.rollup(ActivityType.REALISE).carried_expected == 0

    def test_unknown_raises(self):
        state = ProgressState()
        with pytest.raises(UnknownActivity):
            state.set_expected(3, ActivityType.DOWNLOAD, 10)
        assert ActivityType.DOWNLOAD not in state.by_type


class TestResults:
    """Tests for result events."""

    def test_file_linked(self):
        state = ProgressState()
        assert state.apply_result(0, ResultType.FILE_LINKED, [4096])
        assert state.bytes_linked == 4096
        assert state.files_linked == 1

    def test_file_linked_does_not_need_live_activity(self):
        state = ProgressState()
        state.apply_result(42, ResultType.FILE_LINKED, [10])
        state.apply_result(43, ResultType.FILE_LINKED, [20])
        assert (state.files_linked, state.bytes_linked) == (2, 30)

    def test_untrusted_and_corrupted(self):
        state = ProgressState()
        state.apply_result(0, ResultType.UNTRUSTED_PATH, ["/store/x"])
        state.apply_result(0, ResultType.CORRUPTED_PATH, ["/store/y"])
        state.apply_result(0, ResultType.CORRUPTED_PATH, ["/store/z"])
        assert state.untrusted_paths == 1
        assert state.corrupted_paths == 2

    def test_log_line_sets_secondary_label_and_moves_to_end(self):
        state = ProgressState()
        state.start(1, ActivityType.BUILD, "a")
        state.start(2, ActivityType.BUILD, "b")
        assert state.apply_result(1, ResultType.BUILD_LOG_LINE, ["  make all \n"])
        assert state.get(1).secondary_label == "make all"
        assert list(state.activities) == [2, 1]
        # Still indexed by type after the move
        assert state.rollup(ActivityType.BUILD).live[1] is state.get(1)

    def test_blank_log_line_ignored(self):
        state = ProgressState()
        state.start(1, ActivityType.BUILD, "a")
        state.start(2, ActivityType.BUILD, "b")
        assert not state.apply_result(1, ResultType.BUILD_LOG_LINE, [" \t\r\n"])
        assert state.get(1).secondary_label == ""
        assert list(state.activities) == [1, 2]

    def test_log_line_unknown_activity_raises(self):
        state = ProgressState()
        with pytest.raises(UnknownActivity):
            state.apply_result(5, ResultType.BUILD_LOG_LINE, ["hello"])

    def test_log_line_does_not_touch_expected(self):
        state = ProgressState()
        state.start(2, ActivityType.DOWNLOAD, "")
        state.set_expected(2, ActivityType.DOWNLOAD, 1000)
        state.apply_result(2, ResultType.BUILD_LOG_LINE, ["fetching foo"])
        assert state.rollup(ActivityType.DOWNLOAD).carried_expected == 1000
        state.stop(2)
        assert state.rollup(ActivityType.DOWNLOAD).carried_expected == 0

    def test_progress_result(self):
        state = ProgressState()
        state.start(1, ActivityType.BUILD, "a")
        state.apply_result(1, ResultType.PROGRESS, [1, 4, 2, 0])
        activity = state.get(1)
        assert (activity.done, activity.expected, activity.running) == (1, 4, 2)

    def test_set_expected_result(self):
        state = ProgressState()
        state.start(1, ActivityType.COPY_PATHS, "")
        fields = [int(ActivityType.COPY_PATH), 77]
        state.apply_result(1, ResultType.SET_EXPECTED, fields)
        assert state.rollup(ActivityType.COPY_PATH).carried_expected == 77

    def test_unknown_result_kind_ignored(self):
        state = ProgressState()
        assert not state.apply_result(1, 999, ["x"])
        assert not state.apply_result(1, ResultType.SET_PHASE, ["building"])

    def test_invalid_fields_leave_state_unchanged(self):
        state = ProgressState()
        with pytest.raises(InvalidResultFields):
            state.apply_result(0, ResultType.FILE_LINKED, ["4096"])
        with pytest.raises(InvalidResultFields):
            state.apply_result(0, ResultType.FILE_LINKED, [])
        assert (state.files_linked, state.bytes_linked) == (0, 0)


class TestFieldAccess:
    """Tests for typed result field access."""

    def test_get_string(self):
        assert get_string(["a", 1], 0) == "a"

    def test_get_string_wrong_type(self):
        with pytest.raises(InvalidResultFields):
            get_string([1], 0)

    def test_get_int(self):
        assert get_int(["a", 12], 1) == 12

    def test_get_int_rejects_bool(self):
        with pytest.raises(InvalidResultFields):
            get_int([True], 0)

    def test_missing_field(self):
        with pytest.raises(InvalidResultFields, match="missing field 2"):
            get_int([1, 2], 2)

    def test_invalid_fields_is_value_error(self):
        with pytest.raises(ValueError):
            get_string([], 0)


class TestCurrentActivity:
    """Tests for picking the activity to display."""

    def test_none_when_empty(self):
        assert ProgressState().current_activity() is None

    def test_skips_blank_activities(self):
        state = ProgressState()
        state.start(1, ActivityType.BUILD, "x")
        state.start(2, ActivityType.BUILD, "")
        assert state.current_activity().activity_id == 1

    def test_none_when_all_blank(self):
        state = ProgressState()
        state.start(1, ActivityType.COPY_PATHS, "")
        assert state.current_activity() is None

    def test_most_recent_log_line_wins(self):
        state = ProgressState()
        state.start(1, ActivityType.BUILD, "a")
        state.start(2, ActivityType.BUILD, "b")
        state.apply_result(1, ResultType.BUILD_LOG_LINE, ["compiling"])
        assert state.current_activity().display_text == "a: compiling"


class TestRollupInvariant:
    """carried_done + live done always equals everything ever reported."""

    @pytest.mark.parametrize("seed", [0, 1, 2, 3, 4])
    def test_random_sequences(self, seed):
        rng = random.Random(seed)
        state = ProgressState()
        latest_done: dict[int, int] = {}  # final done of every activity ever seen
        next_id = 1

        for _ in range(500):
            live = list(state.activities)
            op = rng.choice(["start", "progress", "stop", "stop_again"])
            if op == "start" or not live:
                state.start(next_id, ActivityType.BUILD, f"pkg{next_id}")
                latest_done[next_id] = 0
                next_id += 1
            elif op == "progress":
                act = rng.choice(live)
                done = rng.randint(0, 20)
                state.progress(act, done=done, expected=20, failed=rng.randint(0, 1))
                latest_done[act] = done
            else:
                act = rng.choice(live)
                state.stop(act)
                if op == "stop_again":
                    state.stop(act)

            rollup = state.rollup(ActivityType.BUILD)
            live_done = sum(a.done for a in rollup.live.values())
            assert rollup.carried_done + live_done == sum(latest_done.values())
            assert set(rollup.live) == set(state.activities)

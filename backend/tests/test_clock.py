from datetime import datetime, timedelta

from kabaddi.services.matches import clock


T0 = datetime(2030, 1, 1, 12, 0, 0)


def at(seconds):
    return T0 + timedelta(seconds=seconds)


def test_elapsed_rounds_to_nearest_second():
    assert clock.elapsed_seconds(T0, at(2.4)) == 2
    assert clock.elapsed_seconds(T0, at(2.5)) == 3
    assert clock.elapsed_seconds(T0, at(2.6)) == 3
    assert clock.elapsed_seconds(None, at(50)) == 0


def test_reconcile_live_counts_down():
    assert clock.reconcile_live(2400, T0, at(100)) == (2300, False)


def test_reconcile_live_expires_at_zero_and_below():
    assert clock.reconcile_live(2400, T0, at(2400)) == (0, True)
    assert clock.reconcile_live(2400, T0, at(5000)) == (0, True)


def test_reconcile_live_without_start_time_is_untouched():
    assert clock.reconcile_live(2400, None, at(100)) == (2400, False)


def test_consume_segment_never_goes_negative():
    assert clock.consume_segment(2400, T0, at(100)) == 2300
    assert clock.consume_segment(2400, T0, at(2400)) == 0
    assert clock.consume_segment(10, T0, at(99)) == 0


def test_clamp_non_negative():
    assert clock.clamp_non_negative(-12) == (0, True)
    assert clock.clamp_non_negative(0) == (0, False)
    assert clock.clamp_non_negative(30) == (30, False)


def test_project_status_live_before_and_after_expiry():
    assert clock.project_status('live', 2400, T0, at(100)) == ('live', 2300, False)
    assert clock.project_status('live', 2400, T0, at(2400)) == ('completed', 0, True)


def test_project_status_leaves_paused_clock_alone():
    assert clock.project_status('paused', 1200, T0, at(9999)) == ('paused', 1200, False)


def test_project_status_repairs_negative_remaining():
    assert clock.project_status('paused', -5, None, at(0)) == ('completed', 0, True)
    # Already completed: clamp for display, nothing to persist
    assert clock.project_status('completed', -5, None, at(0)) == ('completed', 0, False)

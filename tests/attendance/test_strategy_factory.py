from src.attendance_report.attendance_report.attendance.factory import LatenessStrategyFactory
from src.attendance_report.attendance_report.attendance.strategies.threshold_strategy import ThresholdStrategy
from src.attendance_report.attendance_report.attendance.strategies.upstream_flag_strategy import UpstreamFlagStrategy
from src.attendance_report.attendance_report.core.enums import LatenessMode, LatePunchScope, SourceKind


def test_factory_stats_source_uses_upstream_flag():
    strategy = LatenessStrategyFactory().for_source(SourceKind.STATS)

    assert isinstance(strategy, UpstreamFlagStrategy)
    assert strategy.mode == LatenessMode.UPSTREAM_FLAG


def test_factory_task_source_uses_threshold():
    strategy = LatenessStrategyFactory(threshold_minutes=9 * 60).for_source(SourceKind.TASK)

    assert isinstance(strategy, ThresholdStrategy)
    assert strategy.threshold_minutes == 540


def test_threshold_is_strictly_after_eight():
    strategy = ThresholdStrategy()

    assert strategy.decide(total_minutes=480).is_late is False
    assert strategy.decide(total_minutes=481).is_late is True


def test_threshold_ignores_upstream_flag():
    assert ThresholdStrategy().decide(total_minutes=470, upstream_flag=True).is_late is False


def test_upstream_flag_ignores_clock_time():
    strategy = UpstreamFlagStrategy()

    assert strategy.decide(total_minutes=600, upstream_flag=False).is_late is False
    assert strategy.decide(total_minutes=420, upstream_flag=True).is_late is True


def test_on_duty_scope_skips_off_duty_punches():
    on_duty_only = ThresholdStrategy(scope=LatePunchScope.ON_DUTY_ONLY)
    any_punch = ThresholdStrategy(scope=LatePunchScope.ANY_PUNCH)

    assert on_duty_only.decide(total_minutes=500, check_in_type="OffDuty").is_late is False
    assert on_duty_only.decide(total_minutes=500, check_in_type="OnDuty").is_late is True
    assert on_duty_only.decide(total_minutes=500, check_in_type=None).is_late is True
    assert any_punch.decide(total_minutes=500, check_in_type="OffDuty").is_late is True

"""RecycleBinSweeperのテストコード"""

import time
from unittest.mock import MagicMock

import pytest

from src.task_tracker.sweeper import RecycleBinSweeper
from src.todo import TodoLifecycleManager


@pytest.fixture
def mock_manager():
    """モックTodoLifecycleManagerを作成"""
    manager = MagicMock(spec=TodoLifecycleManager)
    manager.sweep.return_value = 2
    return manager


def test_sweeper_run_once_updates_status(mock_manager):
    """run_onceがsweepを呼び、結果を状態に反映することを確認"""
    sweeper = RecycleBinSweeper(mock_manager, interval_seconds=60)

    assert sweeper.run_once() == 2

    status = sweeper.get_status()
    assert status["last_removed"] == 2
    assert status["last_run"] is not None
    assert status["running"] is False
    mock_manager.sweep.assert_called_once_with()


def test_sweeper_start_stop(mock_manager):
    """スケジューラーの開始/停止が正常に動作することを確認"""
    sweeper = RecycleBinSweeper(mock_manager, interval_seconds=60)

    sweeper.start()
    assert sweeper.get_status()["running"] is True

    sweeper.stop()
    assert sweeper.get_status()["running"] is False


def test_sweeper_loop_runs_periodically(mock_manager):
    """interval経過後にsweepが実行されることを確認"""
    sweeper = RecycleBinSweeper(mock_manager, interval_seconds=1)

    sweeper.start()
    time.sleep(1.5)
    sweeper.stop()

    assert mock_manager.sweep.called


def test_sweeper_survives_sweep_failure(mock_manager):
    """sweepが例外を投げてもループが継続することを確認"""
    mock_manager.sweep.side_effect = [RuntimeError("boom"), 0, 0, 0]
    sweeper = RecycleBinSweeper(mock_manager, interval_seconds=1)

    sweeper.start()
    time.sleep(2.5)
    sweeper.stop()

    assert mock_manager.sweep.call_count >= 2


def test_sweeper_rejects_invalid_interval(mock_manager):
    """不正な実行間隔はエラー"""
    with pytest.raises(ValueError):
        RecycleBinSweeper(mock_manager, interval_seconds=0)


def test_server_sweeper_disabled_for_sub_second_interval(monkeypatch):
    """1秒未満の間隔ではスイーパーを起動しない"""
    from src.server import dependencies

    monkeypatch.setattr(dependencies.config.recycle_bin, "sweep_interval_seconds", 0.5)
    dependencies.get_sweeper.cache_clear()
    try:
        assert dependencies.get_sweeper() is None
    finally:
        dependencies.get_sweeper.cache_clear()

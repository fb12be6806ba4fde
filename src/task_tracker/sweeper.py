"""
ごみ箱の定期スイープ用スケジューラーモジュール

関連クラス:
  - todo.TodoLifecycleManager: sweep() を提供
"""

import logging
import threading
import time
from typing import Any, Dict, Optional

from src.todo import TodoLifecycleManager


class RecycleBinSweeper:
    """保持期間を過ぎたタスクを定期的に削除するスケジューラークラス"""

    def __init__(self, manager: TodoLifecycleManager, interval_seconds: int = 3600):
        """
        初期化

        Args:
            manager: TodoLifecycleManagerインスタンス
            interval_seconds: 実行間隔（秒）
        """
        if interval_seconds < 1:
            raise ValueError("Interval must be at least 1 second")

        self.manager = manager
        self.interval_seconds = interval_seconds
        self.logger = logging.getLogger(__name__)

        # 状態管理
        self._running = False
        self._lock = threading.Lock()
        self._last_run: Optional[float] = None
        self._last_removed = 0
        self._stop_event = threading.Event()

        # スレッド
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        """スケジューラーを開始（バックグラウンドスレッド起動）"""
        with self._lock:
            if self._running:
                self.logger.warning("Sweeper is already running")
                return

            self._running = True
            self._stop_event.clear()
            self._thread = threading.Thread(target=self._run_loop, daemon=True)
            self._thread.start()
            self.logger.info("Recycle bin sweeper started (interval=%ss)", self.interval_seconds)

    def stop(self) -> None:
        """スケジューラーを停止"""
        with self._lock:
            if not self._running:
                self.logger.warning("Sweeper is not running")
                return

            self._running = False
            self._stop_event.set()
            self.logger.info("Stopping recycle bin sweeper...")

        # スレッドの終了を待機
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)
            self.logger.info("Recycle bin sweeper stopped")

    def get_status(self) -> Dict[str, Any]:
        """現在の状態を取得"""
        with self._lock:
            return {
                "running": self._running,
                "interval_seconds": self.interval_seconds,
                "last_run": self._last_run,
                "last_removed": self._last_removed,
            }

    def run_once(self) -> int:
        """スイープを1回実行し、削除件数を返す"""
        removed = self.manager.sweep()
        with self._lock:
            self._last_run = time.time()
            self._last_removed = removed
        return removed

    def _run_loop(self) -> None:
        """
        メインループ（バックグラウンドスレッドで実行）

        interval_secondsごとにrun_onceを呼び出す
        """
        self.logger.info("Sweeper loop started")

        while not self._stop_event.wait(self.interval_seconds):
            try:
                self.run_once()
            except Exception as e:
                self.logger.error(f"Recycle bin sweep failed: {e}", exc_info=True)

        self.logger.info("Sweeper loop exited")

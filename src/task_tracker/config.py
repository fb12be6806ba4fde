"""
設定管理モジュール

関連クラス:
  - todo.TodoRepository: storage.db_path を使用
  - todo.TodoLifecycleManager: recycle_bin 設定を使用
  - task_tracker.sweeper.RecycleBinSweeper: 定期スイープ間隔を使用
"""

import os
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

PROJECT_ROOT = Path(__file__).parent.parent.parent


@dataclass
class RecycleBinConfig:
    """ごみ箱（保持期間）設定"""

    retention_days: int = 30
    sweep_on_view: bool = True
    sweep_interval_seconds: int = 3600  # 1未満で定期スイープ無効

    @property
    def retention(self) -> timedelta:
        return timedelta(days=self.retention_days)


@dataclass
class ServerConfig:
    """APIサーバー設定"""

    host: str = "0.0.0.0"
    port: int = 8000


@dataclass
class Config:
    """アプリケーション設定クラス"""

    # ストレージ設定
    db_path: str = "data/task_tracker.db"

    # ごみ箱設定
    recycle_bin: RecycleBinConfig = None  # type: ignore

    # サーバー設定
    server: ServerConfig = None  # type: ignore

    # ログ設定
    log_level: str = "INFO"
    log_file: Optional[str] = "logs/task_tracker.log"

    def __post_init__(self):
        """デフォルト値の初期化"""
        if self.recycle_bin is None:
            self.recycle_bin = RecycleBinConfig()
        if self.server is None:
            self.server = ServerConfig()

    def resolve_db_path(self) -> Path:
        """db_pathをプロジェクトルート基準の絶対パスに変換"""
        path = Path(self.db_path)
        return path if path.is_absolute() else PROJECT_ROOT / path

    @classmethod
    def from_yaml(cls, config_path: Optional[Path] = None) -> "Config":
        """YAMLファイルから設定を読み込む

        Args:
            config_path: 設定ファイルパス（省略時はconfig/app_config.yamlを使用）

        Returns:
            Config: 設定インスタンス（ファイルが無い場合はデフォルト値）
        """
        if config_path is None:
            config_path = PROJECT_ROOT / "config" / "app_config.yaml"

        if not Path(config_path).exists():
            return cls()

        with open(config_path, "r", encoding="utf-8") as f:
            yaml_data: Dict[str, Any] = yaml.safe_load(f) or {}

        # YAML構造から設定を抽出
        storage_data = yaml_data.get("storage", {})
        recycle_data = yaml_data.get("recycle_bin", {})
        server_data = yaml_data.get("server", {})
        log_data = yaml_data.get("log", {})

        return cls(
            db_path=storage_data.get("db_path", "data/task_tracker.db"),
            recycle_bin=RecycleBinConfig(
                retention_days=int(recycle_data.get("retention_days", 30)),
                sweep_on_view=bool(recycle_data.get("sweep_on_view", True)),
                sweep_interval_seconds=int(recycle_data.get("sweep_interval_seconds", 3600)),
            ),
            server=ServerConfig(
                host=server_data.get("host", "0.0.0.0"),
                port=int(server_data.get("port", 8000)),
            ),
            log_level=log_data.get("level", "INFO"),
            log_file=log_data.get("file", "logs/task_tracker.log"),
        )

    @classmethod
    def from_env(cls) -> "Config":
        """環境変数から設定を読み込む"""
        return cls(
            db_path=os.getenv("TASK_TRACKER_DB_PATH", "data/task_tracker.db"),
            recycle_bin=RecycleBinConfig(
                retention_days=int(os.getenv("RECYCLE_RETENTION_DAYS", "30")),
                sweep_on_view=os.getenv("RECYCLE_SWEEP_ON_VIEW", "1").lower()
                not in {"0", "false", "no", "off"},
                sweep_interval_seconds=int(os.getenv("RECYCLE_SWEEP_INTERVAL", "3600")),
            ),
            server=ServerConfig(
                host=os.getenv("SERVER_HOST", "0.0.0.0"),
                port=int(os.getenv("SERVER_PORT", "8000")),
            ),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_file=os.getenv("LOG_FILE", "logs/task_tracker.log") or None,
        )

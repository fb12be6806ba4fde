#!/usr/bin/env python3
"""
TODO管理CLI - ごみ箱（30日保持）付きタスク管理のコマンドラインインターフェース

Usage:
    python -m src.todo.cli list [--status all|active|completed] [--category CAT] [--due-date YYYY-MM-DD] [--format json|text]
    python -m src.todo.cli add --title "タイトル" [--due-date YYYY-MM-DD] [--category CAT]
    python -m src.todo.cli get --id ID
    python -m src.todo.cli update --id ID [--title "新タイトル"] [--due-date YYYY-MM-DD] [--clear-due-date] [--category CAT] [--clear-category]
    python -m src.todo.cli toggle --id ID
    python -m src.todo.cli delete --id ID       # ごみ箱へ移動
    python -m src.todo.cli restore --id ID      # ごみ箱から復元
    python -m src.todo.cli purge --id ID        # ごみ箱から完全削除
    python -m src.todo.cli bin                  # ごみ箱一覧（期限切れは先に削除）
    python -m src.todo.cli sweep [--retention-days N]
    python -m src.todo.cli empty-bin
    python -m src.todo.cli dates
"""

from __future__ import annotations

import argparse
import json
import sys
from datetime import timedelta
from pathlib import Path
from typing import Any, Dict, List, Optional

from src.task_tracker.config import Config

from .exceptions import TodoError
from .lifecycle import TodoLifecycleManager
from .models import TodoFilter, TodoItem
from .repository import TodoRepository
from .stores import UNSET


def _iso(value) -> Optional[str]:
    return value.isoformat() if value is not None else None


def format_todo_text(todo: TodoItem) -> str:
    """Todoアイテムをテキスト形式で整形"""
    mark = "x" if todo.completed else " "
    due = todo.due_date or "未設定"
    category = todo.category or "なし"
    line = f"[{mark}] {todo.id} | 期限: {due} | 分類: {category} | {todo.title}"
    if todo.deleted_at is not None:
        line += f" | 削除日時: {todo.deleted_at.isoformat()}"
    return line


def format_todo_json(todo: TodoItem) -> Dict[str, Any]:
    """Todoアイテムを辞書形式に変換"""
    return {
        "id": todo.id,
        "title": todo.title,
        "completed": todo.completed,
        "due_date": todo.due_date,
        "category": todo.category,
        "created_at": _iso(todo.created_at),
        "updated_at": _iso(todo.updated_at),
        "deleted_at": _iso(todo.deleted_at),
        "restored_at": _iso(todo.restored_at),
    }


def _print_items(items: List[TodoItem], output_format: str, empty_message: str) -> None:
    if output_format == "json":
        print(json.dumps([format_todo_json(item) for item in items], ensure_ascii=False))
    elif not items:
        print(empty_message)
    else:
        for item in items:
            print(format_todo_text(item))


def _print_item(item: TodoItem, output_format: str, label: str) -> None:
    if output_format == "json":
        print(json.dumps(format_todo_json(item), ensure_ascii=False))
    elif label:
        print(f"{label}: {format_todo_text(item)}")
    else:
        print(format_todo_text(item))


def _print_count(count: int, output_format: str, label: str) -> None:
    if output_format == "json":
        print(json.dumps({"removed_count": count}, ensure_ascii=False))
    else:
        print(f"{label}: {count}件")


def run_command(manager: TodoLifecycleManager, args: argparse.Namespace) -> int:
    """サブコマンドを実行"""
    fmt = args.format

    if args.command == "list":
        items = manager.list_active(TodoFilter(args.status), args.category, args.due_date)
        _print_items(items, fmt, "TODOは登録されていません。")
    elif args.command == "add":
        _print_item(manager.create(args.title, args.due_date, args.category), fmt, "追加しました")
    elif args.command == "get":
        _print_item(manager.get(args.id), fmt, "")
    elif args.command == "update":
        due_date: Any = UNSET
        if args.clear_due_date:
            due_date = None
        elif args.due_date is not None:
            due_date = args.due_date
        category: Any = UNSET
        if args.clear_category:
            category = None
        elif args.category is not None:
            category = args.category
        updated = manager.edit(args.id, title=args.title, due_date=due_date, category=category)
        _print_item(updated, fmt, "更新しました")
    elif args.command == "toggle":
        _print_item(manager.toggle_complete(args.id), fmt, "切り替えました")
    elif args.command == "delete":
        _print_item(manager.delete(args.id), fmt, "ごみ箱に移動しました")
    elif args.command == "restore":
        _print_item(manager.restore(args.id), fmt, "復元しました")
    elif args.command == "purge":
        _print_item(manager.purge_one(args.id), fmt, "完全に削除しました")
    elif args.command == "bin":
        _print_items(manager.list_recycled(), fmt, "ごみ箱は空です。")
    elif args.command == "sweep":
        retention = timedelta(days=args.retention_days) if args.retention_days is not None else None
        _print_count(manager.sweep(retention=retention), fmt, "期限切れを削除しました")
    elif args.command == "empty-bin":
        _print_count(manager.empty_bin(), fmt, "ごみ箱を空にしました")
    elif args.command == "dates":
        dates = manager.dates_with_tasks()
        if fmt == "json":
            print(json.dumps(dates))
        else:
            print("\n".join(dates) if dates else "期限付きのTODOはありません。")
    else:
        print(f"Error: 不明なコマンド: {args.command}", file=sys.stderr)
        return 1
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="TODO管理CLI - ごみ箱付きタスク管理",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--db-path",
        type=str,
        help="SQLiteデータベースファイルのパス（デフォルト: 設定ファイルのstorage.db_path）",
    )

    # 共通オプション
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--format",
        choices=["json", "text"],
        default="text",
        help="出力フォーマット（デフォルト: text）",
    )
    with_id = argparse.ArgumentParser(add_help=False)
    with_id.add_argument("--id", required=True, help="対象TODOのID")

    subparsers = parser.add_subparsers(dest="command", help="実行するコマンド", required=True)

    parser_list = subparsers.add_parser("list", parents=[common], help="TODOリストを表示")
    parser_list.add_argument(
        "--status",
        choices=[f.value for f in TodoFilter],
        default=TodoFilter.ALL.value,
        help="完了状態で絞り込み（デフォルト: all）",
    )
    parser_list.add_argument("--category", help="分類で絞り込み")
    parser_list.add_argument("--due-date", help="期限日で絞り込み（YYYY-MM-DD形式）")

    parser_add = subparsers.add_parser("add", parents=[common], help="新しいTODOを追加")
    parser_add.add_argument("--title", required=True, help="TODOのタイトル")
    parser_add.add_argument("--due-date", help="期限日（YYYY-MM-DD形式）")
    parser_add.add_argument("--category", help="分類（home, school, shopping など）")

    subparsers.add_parser("get", parents=[common, with_id], help="特定のTODOを取得")

    parser_update = subparsers.add_parser(
        "update", parents=[common, with_id], help="既存のTODOを更新"
    )
    parser_update.add_argument("--title", help="新しいタイトル")
    parser_update.add_argument("--due-date", help="新しい期限日（YYYY-MM-DD形式）")
    parser_update.add_argument("--clear-due-date", action="store_true", help="期限日をクリア")
    parser_update.add_argument("--category", help="新しい分類")
    parser_update.add_argument("--clear-category", action="store_true", help="分類をクリア")

    subparsers.add_parser("toggle", parents=[common, with_id], help="完了状態を切り替える")
    subparsers.add_parser("delete", parents=[common, with_id], help="TODOをごみ箱に移動")
    subparsers.add_parser("restore", parents=[common, with_id], help="ごみ箱からTODOを復元")
    subparsers.add_parser("purge", parents=[common, with_id], help="ごみ箱のTODOを完全に削除")
    subparsers.add_parser("bin", parents=[common], help="ごみ箱の中身を表示")

    parser_sweep = subparsers.add_parser(
        "sweep", parents=[common], help="保持期間を過ぎたTODOをごみ箱から削除"
    )
    parser_sweep.add_argument(
        "--retention-days", type=int, help="保持日数（デフォルト: 設定ファイルの値）"
    )

    subparsers.add_parser("empty-bin", parents=[common], help="ごみ箱を空にする")
    subparsers.add_parser("dates", parents=[common], help="TODOがある期限日の一覧")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """CLIエントリポイント"""
    args = build_parser().parse_args(argv)

    config = Config.from_yaml()
    db_path = Path(args.db_path) if args.db_path else None

    try:
        # リポジトリ初期化（--db-path > 環境変数 > 設定ファイル）
        if db_path is None and not TodoRepository.env_db_path():
            db_path = config.resolve_db_path()
        manager = TodoLifecycleManager(
            TodoRepository(db_path=db_path),
            retention=config.recycle_bin.retention,
            sweep_on_view=config.recycle_bin.sweep_on_view,
        )
        return run_command(manager, args)
    except TodoError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())

"""
Discord Webhook通知を行うユーティリティ。

songs.db ダンプの結果(成功時はバージョン・件数、失敗時は例外内容)を
Discordへ送信する。通知失敗は処理全体の失敗とはみなさない。
"""

from __future__ import annotations

import requests
from requests import RequestException

from songdb.stream_driver import DumpResult

MAX_ERROR_TEXT = 1800


def build_success_message(output_path: str, result: DumpResult) -> str:
    return (
        f"✅ {output_path} 生成成功\n"
        f"- songdb version: {result.version}\n"
        f"- songs: {result.record_count}\n"
    )


def build_failure_message(output_path: str, exc: BaseException) -> str:
    """例外名と本文を含む失敗通知を組み立てる。本文は Discord の文字数上限に収める。"""
    detail = f"{type(exc).__name__}: {exc}"
    return (
        f"❌ {output_path} 生成失敗\n"
        f"```{detail[:MAX_ERROR_TEXT]}```"
    )


def send_discord(webhook_url: str, message: str) -> None:
    """
    Discord Webhookへメッセージを送信する。

    webhook_urlが空の場合は何もせず終了する。
    送信失敗(接続エラー・タイムアウト)は握りつぶす。

    Args:
        webhook_url: Discord Webhook URL。
        message: 送信する本文。
    """
    if not webhook_url:
        return

    try:
        requests.post(webhook_url, json={"content": message}, timeout=15)
    except RequestException:
        return

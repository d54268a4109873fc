import os
import sys
from pathlib import Path

from songdb.config import load_settings, resolve_settings_path
from songdb.converter import convert_songs_db
from songdb.discord_notify import build_failure_message, build_success_message, send_discord
from songdb.errors import ConfigError, SongDbError
from songdb.logger import log_exception, setup_logger


def main() -> int:
    """
    songs.db を読み込み、XML ダンプを出力するメイン処理。
    以下の処理を順序実行する:
    1. settings.yaml（任意）から入出力パス等の設定を読み込む
    2. songs.db 先頭のバージョン文字列をログ出力する
    3. Score を1件ずつデコードし、dump.xml へ逐次書き出す
    4. Discord Webhookで処理結果を通知（成功/失敗、設定時のみ）
    環境変数:
    - SONGDB_SETTINGS: 設定ファイルパス(デフォルト: "settings.yaml")
    - DISCORD_WEBHOOK_URL: Discord通知先(オプション)
    Returns:
        int: 終了コード。成功時 0、失敗時 1。
    """
    discord_webhook = os.environ.get("DISCORD_WEBHOOK_URL")

    try:
        settings = load_settings(resolve_settings_path())
    except ConfigError as exc:
        log_exception(setup_logger(), "failed to load settings", exc)
        return 1

    logger = setup_logger(
        level=settings.log_level,
        log_file=Path(settings.log_file) if settings.log_file else None,
    )

    try:
        result = convert_songs_db(
            input_path=settings.input_path,
            output_path=settings.output_path,
            atomic_output=settings.atomic_output,
        )
    except (SongDbError, OSError) as exc:
        log_exception(logger, f"failed to convert {settings.input_path}", exc)
        if discord_webhook:
            send_discord(discord_webhook, build_failure_message(settings.output_path, exc))
        return 1

    if discord_webhook:
        send_discord(discord_webhook, build_success_message(settings.output_path, result))

    return 0


if __name__ == "__main__":
    sys.exit(main())

"""
設定ファイル(settings.yaml)の読み込み処理を提供するモジュール。

settings.yaml から songs.db ダンプに必要な各種設定を読み込み、
アプリ内で扱いやすい dataclass に変換する。
設定ファイルが存在しない場合は全て既定値で動作する。
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

import yaml

from songdb.errors import ConfigError

DEFAULT_SETTINGS_PATH = "settings.yaml"
SETTINGS_PATH_ENV = "SONGDB_SETTINGS"


@dataclass(frozen=True)
class Settings:
    """
    アプリケーション全体設定。

    Attributes:
        input_path: 入力 songs.db のパス。
        output_path: 出力 XML のパス。
        atomic_output: True の場合、一時ファイルへ書き出し正常終了時のみ置き換える。
        log_level: コンソールログのレベル名。
        log_file: 詳細ログの出力先。None の場合はファイルへ出力しない。
    """

    input_path: str = "songs.db"
    output_path: str = "dump.xml"
    atomic_output: bool = False
    log_level: str = "INFO"
    log_file: Optional[str] = None


def resolve_settings_path() -> str:
    """環境変数 SONGDB_SETTINGS があればそのパス、無ければ settings.yaml を返す。"""
    return os.environ.get(SETTINGS_PATH_ENV) or DEFAULT_SETTINGS_PATH


def load_settings(path: str) -> Settings:
    """
    settings.yaml を読み込み Settings に変換する。

    Args:
        path: settings.yaml のファイルパス。

    Returns:
        Settingsオブジェクト。ファイルが存在しない場合は既定値。

    Raises:
        ConfigError: YAMLのパースに失敗した場合、またはトップレベルがマッピングでない場合。
            log_level が不明なレベル名の場合、atomic_output が真偽値でない場合も含む。
    """
    if not os.path.exists(path):
        return Settings()

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise ConfigError(f"failed to parse {path}: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"failed to read {path}: {exc}") from exc

    if data is None:
        return Settings()
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping at the top level")

    defaults = Settings()
    log_file = data.get("log_file")
    log_level = str(data.get("log_level", defaults.log_level)).upper()
    if not isinstance(logging.getLevelName(log_level), int):
        raise ConfigError(f"unknown log_level in {path}: {log_level}")

    atomic_output = data.get("atomic_output", defaults.atomic_output)
    if not isinstance(atomic_output, bool):
        raise ConfigError(f"atomic_output in {path} must be true or false: {atomic_output!r}")

    return Settings(
        input_path=str(data.get("input_path", defaults.input_path)),
        output_path=str(data.get("output_path", defaults.output_path)),
        atomic_output=atomic_output,
        log_level=log_level,
        log_file=str(log_file) if log_file else None,
    )

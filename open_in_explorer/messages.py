"""User-facing message catalog (Japanese and English)."""

from __future__ import annotations

from enum import Enum

from open_in_explorer.logging_config import get_logger

logger = get_logger(__name__)


class Language(Enum):
    """Languages the messages are available in."""

    JA = "ja"
    EN = "en"


DEFAULT_LANGUAGE = Language.JA

_MESSAGES: dict[str, dict[Language, str]] = {
    "no_valid_path": {
        Language.JA: "有効なファイルパスを選択してください。",
        Language.EN: "Please select a valid file path.",
    },
    "invalid_path": {
        Language.JA: "選択されたテキストは有効なパスではありません。",
        Language.EN: "The selected text is not a valid path.",
    },
    "invalid_windows_path": {
        Language.JA: "選択されたテキストは有効なWindowsのパスではありません。",
        Language.EN: "The selected text is not a valid Windows path.",
    },
    "invalid_macos_path": {
        Language.JA: "選択されたテキストは有効なmacOSの絶対パスではありません。",
        Language.EN: "The selected text is not a valid macOS absolute path.",
    },
    "invalid_linux_path": {
        Language.JA: "選択されたテキストは有効なLinuxの絶対パスではありません。",
        Language.EN: "The selected text is not a valid Linux absolute path.",
    },
    "path_not_found": {
        Language.JA: "指定されたパスは存在しません。",
        Language.EN: "The specified path does not exist.",
    },
    "stat_error": {
        Language.JA: "ファイル/フォルダの確認中にエラーが発生しました: {detail}",
        Language.EN: "An error occurred while checking the file/folder: {detail}",
    },
    "editor_open_error": {
        Language.JA: "テキストファイルを開く際にエラーが発生しました：{detail}",
        Language.EN: "An error occurred while opening the text file: {detail}",
    },
    "unsupported_platform": {
        Language.JA: "サポートされていないプラットフォームです: {detail}",
        Language.EN: "Unsupported platform: {detail}",
    },
    "dangerous_command": {
        Language.JA: "無効なカスタムコマンドです。危険な文字列が含まれています: {detail}",
        Language.EN: "Invalid custom command. It contains a dangerous token: {detail}",
    },
    "dispatch_error": {
        Language.JA: "ファイルマネージャーの起動に失敗しました: {detail}",
        Language.EN: "Failed to launch the file manager: {detail}",
    },
    "unexpected_error": {
        Language.JA: "予期しないエラーが発生しました: {detail}",
        Language.EN: "An unexpected error occurred: {detail}",
    },
    "symlink_prompt": {
        Language.JA: "{path} はシンボリックリンクです（リンク先: {target}）。どちらを開きますか？",
        Language.EN: "{path} is a symbolic link (target: {target}). Which one should be opened?",
    },
    "symlink_follow": {
        Language.JA: "リンク先を開く",
        Language.EN: "Follow link",
    },
    "symlink_open_link": {
        Language.JA: "リンク自体を開く",
        Language.EN: "Open link itself",
    },
    "large_file_prompt": {
        Language.JA: "{path} は大きなファイルです（{size} バイト）。どうしますか？",
        Language.EN: "{path} is a large file ({size} bytes). What would you like to do?",
    },
    "large_file_open": {
        Language.JA: "通常通り開く",
        Language.EN: "Open normally",
    },
    "large_file_reveal": {
        Language.JA: "エクスプローラーで表示",
        Language.EN: "Reveal in file manager",
    },
    "large_file_cancel": {
        Language.JA: "キャンセル",
        Language.EN: "Cancel",
    },
}


def parse_language(value: str | Language | None) -> Language:
    """Map a language code to a Language, falling back to Japanese."""
    if isinstance(value, Language):
        return value
    try:
        return Language(str(value).strip().lower())
    except ValueError:
        return DEFAULT_LANGUAGE


def get_message(key: str, language: str | Language | None = None, **fmt: object) -> str:
    """Return the localized text for ``key``.

    Unknown keys return the key itself. ``detail`` defaults to empty; any
    other missing format field returns the unformatted template.
    """
    entry = _MESSAGES.get(key)
    if entry is None:
        logger.debug("No message registered for key %r", key)
        return key

    lang = parse_language(language)
    template = entry.get(lang) or entry[DEFAULT_LANGUAGE]
    fmt.setdefault("detail", "")
    try:
        text = template.format(**fmt)
    except (KeyError, IndexError) as exc:
        logger.debug("Missing format field for message %r: %s", key, exc)
        return template

    # Drop the dangling separator when there is no detail to show
    if not fmt["detail"] and "{detail}" in template:
        text = text.rstrip(": ：")
    return text

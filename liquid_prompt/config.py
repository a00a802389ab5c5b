#!/usr/bin/env python3
import json
import os
import shutil
from pathlib import Path


_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


def _env_flag(name: str):
    value = os.getenv(name)
    if value is None:
        return None
    normalized = value.strip().lower()
    if normalized in _TRUTHY:
        return True
    if normalized in _FALSY:
        return False
    return None


class Config:
    WELCOME_MESSAGE = "LiquidPrompt"
    SHOW_STARTUP_BANNER = True

    CONFIG_DIR = Path.home() / ".liquid_prompt"
    CONFIG_JSON_FILE = CONFIG_DIR / "config.json"
    LOG_FILE = CONFIG_DIR / "shell.log"
    LOG_LEVEL = "WARNING"

    # Diagnostics build: unhandled keys raise instead of only alerting.
    DEBUG = False

    PROMPT_LEADER = "$ "
    PROMPT_TERMINATOR = ">"
    ELAPSED_THRESHOLD_MS = 500

    # Rich style strings for every prompt segment kind.
    PROMPT_STYLES = {
        "default": "default",
        "leader": "bright_green",
        "path": "default",
        "ahead": "bright_black",
        "behind": "bright_yellow",
        "added": "bright_green",
        "modified": "bright_yellow",
        "removed": "bright_red",
        "staged": "bright_magenta",
        "untracked": "green",
        "missing": "bright_red",
        "elapsed": "bright_white",
    }

    MESSAGE_STYLES = {
        "alert": "bold red",
        "error": "red",
        "stderr": "red",
        "interrupt": "yellow",
        "listing": "cyan",
    }

    PANEL_STYLES = {
        "default": {"border_style": "#888888", "padding": (0, 1)},
        "info": {"border_style": "#8caaee", "padding": (0, 1)},
        "warning": {"border_style": "#e5c890", "padding": (0, 1)},
        "error": {"border_style": "#e78284", "padding": (0, 1)},
    }

    GIT_STATUS_ENABLED = True
    GIT_STATUS_UPDATE_INTERVAL = 2.0
    GIT_TIMEOUT = 3.0

    # Prefix used to relaunch a program elevated on POSIX systems.
    ELEVATION_COMMAND = "sudo"
    PIPE_CONSOLE_INPUT = False
    PROCESS_POLL_INTERVAL = 0.1
    KEY_POLL_INTERVAL = 0.02

    CHOICE_DEFAULT_SHELL = "auto"
    DEFAULT_SHELL = (
        "/bin/bash" if os.name != "nt" else os.environ.get("COMSPEC", "cmd.exe")
    )

    @classmethod
    def ensure_directories(cls) -> None:
        cls.CONFIG_DIR.mkdir(parents=True, exist_ok=True)
        if not cls.CONFIG_JSON_FILE.exists():
            cls._write_default_json_config()

    @classmethod
    def get_shell(cls) -> str:
        env_shell = os.getenv("LIQUID_PROMPT_SHELL")
        if env_shell:
            return env_shell

        if os.name == "nt":
            return os.getenv("COMSPEC") or cls.DEFAULT_SHELL

        choice_shell = cls._resolve_shell_choice()
        if choice_shell:
            return choice_shell

        return os.getenv("SHELL") or cls.DEFAULT_SHELL

    @classmethod
    def _resolve_shell_choice(cls) -> str | None:
        choice = (cls.CHOICE_DEFAULT_SHELL or "").strip()
        if not choice or choice.lower() == "auto":
            return None

        expanded = os.path.expanduser(choice)
        if os.path.isabs(expanded) and os.access(expanded, os.X_OK):
            return expanded

        return shutil.which(choice)

    @classmethod
    def is_debug_enabled(cls) -> bool:
        env_value = _env_flag("LIQUID_PROMPT_DEBUG")
        if env_value is not None:
            return env_value
        return bool(cls.DEBUG)

    @classmethod
    def is_pipe_input_enabled(cls) -> bool:
        env_value = _env_flag("LIQUID_PROMPT_PIPE_INPUT")
        if env_value is not None:
            return env_value
        return bool(cls.PIPE_CONSOLE_INPUT)

    @classmethod
    def get_log_level(cls) -> str:
        env_value = os.getenv("LIQUID_PROMPT_LOG_LEVEL")
        if env_value and env_value.strip():
            return env_value.strip().upper()
        return str(cls.LOG_LEVEL).upper()

    @classmethod
    def _load_external_config(cls) -> bool:
        if not cls.CONFIG_JSON_FILE.exists():
            return False

        try:
            with cls.CONFIG_JSON_FILE.open("r", encoding="utf-8") as f:
                config_data = json.load(f)
        except (json.JSONDecodeError, OSError):
            return False

        cls._apply(config_data)
        return True

    @classmethod
    def _apply(cls, config_data: dict) -> None:
        def get_nested(data, *keys, default=None):
            current = data
            for key in keys:
                if isinstance(current, dict) and key in current:
                    current = current[key]
                else:
                    return default
            return current

        cls.WELCOME_MESSAGE = get_nested(
            config_data, "general", "welcome_message", default=cls.WELCOME_MESSAGE
        )
        cls.SHOW_STARTUP_BANNER = get_nested(
            config_data,
            "general",
            "show_startup_banner",
            default=cls.SHOW_STARTUP_BANNER,
        )
        cls.DEBUG = get_nested(config_data, "debug", default=cls.DEBUG)

        cls.PROMPT_LEADER = get_nested(
            config_data, "prompt", "leader", default=cls.PROMPT_LEADER
        )
        cls.PROMPT_TERMINATOR = get_nested(
            config_data, "prompt", "terminator", default=cls.PROMPT_TERMINATOR
        )
        threshold = get_nested(
            config_data,
            "prompt",
            "elapsed_threshold_ms",
            default=cls.ELAPSED_THRESHOLD_MS,
        )
        if isinstance(threshold, (int, float)) and threshold >= 0:
            cls.ELAPSED_THRESHOLD_MS = threshold

        prompt_styles = get_nested(config_data, "prompt", "styles", default=None)
        if isinstance(prompt_styles, dict):
            cls.PROMPT_STYLES = {**cls.PROMPT_STYLES, **prompt_styles}

        cls.DEFAULT_SHELL = get_nested(
            config_data, "shell", "default_shell", default=cls.DEFAULT_SHELL
        )
        cls.CHOICE_DEFAULT_SHELL = get_nested(
            config_data,
            "shell",
            "choice_default_shell",
            default=cls.CHOICE_DEFAULT_SHELL,
        )
        cls.ELEVATION_COMMAND = get_nested(
            config_data, "shell", "elevation_command", default=cls.ELEVATION_COMMAND
        )
        cls.PIPE_CONSOLE_INPUT = get_nested(
            config_data,
            "shell",
            "pipe_console_input",
            default=cls.PIPE_CONSOLE_INPUT,
        )
        poll_interval = get_nested(
            config_data, "shell", "poll_interval", default=cls.PROCESS_POLL_INTERVAL
        )
        if isinstance(poll_interval, (int, float)) and poll_interval > 0:
            cls.PROCESS_POLL_INTERVAL = poll_interval

        cls.GIT_STATUS_ENABLED = get_nested(
            config_data, "git", "enabled", default=cls.GIT_STATUS_ENABLED
        )
        update_interval = get_nested(
            config_data,
            "git",
            "update_interval",
            default=cls.GIT_STATUS_UPDATE_INTERVAL,
        )
        if isinstance(update_interval, (int, float)) and update_interval >= 0:
            cls.GIT_STATUS_UPDATE_INTERVAL = update_interval

        cls.LOG_LEVEL = get_nested(config_data, "logging", "level", default=cls.LOG_LEVEL)

    @classmethod
    def _write_default_json_config(cls) -> None:
        config_data = {
            "general": {
                "welcome_message": cls.WELCOME_MESSAGE,
                "show_startup_banner": cls.SHOW_STARTUP_BANNER,
            },
            "prompt": {
                "leader": cls.PROMPT_LEADER,
                "terminator": cls.PROMPT_TERMINATOR,
                "elapsed_threshold_ms": cls.ELAPSED_THRESHOLD_MS,
                "styles": cls.PROMPT_STYLES,
            },
            "shell": {
                "default_shell": cls.DEFAULT_SHELL,
                "choice_default_shell": cls.CHOICE_DEFAULT_SHELL,
                "elevation_command": cls.ELEVATION_COMMAND,
                "pipe_console_input": cls.PIPE_CONSOLE_INPUT,
                "poll_interval": cls.PROCESS_POLL_INTERVAL,
            },
            "git": {
                "enabled": cls.GIT_STATUS_ENABLED,
                "update_interval": cls.GIT_STATUS_UPDATE_INTERVAL,
            },
            "logging": {"level": cls.LOG_LEVEL},
            "debug": cls.DEBUG,
        }

        try:
            with cls.CONFIG_JSON_FILE.open("w", encoding="utf-8") as f:
                json.dump(config_data, f, indent=2, ensure_ascii=False)
        except OSError:
            pass

    @classmethod
    def reload(cls) -> bool:
        try:
            cls.ensure_directories()
            cls._load_external_config()
            return True
        except Exception:
            return False


Config._load_external_config()

#!/usr/bin/env python3
import os
import sys
import argparse


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="liquid-prompt",
        description="LiquidPrompt: line-editing shell front-end with a live status prompt",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  liquid-prompt                    # Start interactive shell
  liquid-prompt --version          # Show version information
  liquid-prompt --config-reload    # Reload configuration
  liquid-prompt --pipe-input       # Pipe console input to child processes
        """,
    )

    parser.add_argument(
        "--version", "-v",
        action="store_true",
        help="Show version information"
    )

    parser.add_argument(
        "--config-reload",
        action="store_true",
        help="Reload configuration and exit"
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Raise on unhandled keys and log at DEBUG level"
    )

    parser.add_argument(
        "--pipe-input",
        action="store_true",
        help="Forward console input byte by byte to executed commands (experimental)"
    )
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    if args.version:
        from liquid_prompt import __version__
        print(f"LiquidPrompt version {__version__}")
        return 0

    if args.config_reload:
        from liquid_prompt.config import Config
        if Config.reload():
            print("Configuration reloaded successfully")
        else:
            print("Failed to reload configuration")
        return 0

    if args.debug:
        os.environ["LIQUID_PROMPT_DEBUG"] = "1"
        os.environ.setdefault("LIQUID_PROMPT_LOG_LEVEL", "DEBUG")
    if args.pipe_input:
        os.environ["LIQUID_PROMPT_PIPE_INPUT"] = "1"

    try:
        from liquid_prompt import app

        return app.main()

    except KeyboardInterrupt:
        print("\nBye!")
        return 0
    except Exception as exc:
        print(f"Error: {exc}")
        return 1


if __name__ == "__main__":
    sys.exit(main())

#!/usr/bin/env python3
"""
CLI interface for quipsync.
Handles command-line argument parsing, configuration overrides, and entry point setup.
"""

import asyncio
import argparse
import json
import sys
from pathlib import Path

from .config import AppConfig, set_config
from .engine import StrictJSONCompleter
from .errors import CompletionError, InputError
from .llm_backend import AnthropicGateway, resolve_model
from .service import CompletionService
from .styles import STYLE_DIRECTIVES
from .telemetry import logger, setup_logging

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_INPUT = 2


def auto_cast_value(value):
    """Auto-cast string values to appropriate types (bool, int, float, or string)."""
    if isinstance(value, bool):
        return value

    if not isinstance(value, str):
        return value

    if value.lower() in ('true', 'yes'):
        return True
    if value.lower() in ('false', 'no'):
        return False

    try:
        return int(value)
    except ValueError:
        pass

    try:
        return float(value)
    except ValueError:
        pass

    return value


def parse_cli_overrides(args_list):
    """
    Parse dotted CLI arguments into a nested dictionary.

    Examples:
        --server.port 9000
            → {'server': {'port': 9000}}

        --completion.script.temperature=0.4
            → {'completion': {'script': {'temperature': 0.4}}}

    Args:
        args_list: Arguments argparse did not recognise

    Returns:
        dict: Nested dictionary with configuration overrides

    Raises:
        ValueError: an argument is not a dotted flag, or two flags conflict
    """
    overrides = {}

    i = 0
    while i < len(args_list):
        arg = args_list[i]
        if not arg.startswith('--') or '.' not in arg.split('=', 1)[0]:
            raise ValueError(f"Unrecognized argument: {arg}")

        key_path = arg[2:]
        if '=' in key_path:
            key_path, value = key_path.split('=', 1)
            i += 1
        elif i + 1 < len(args_list) and not args_list[i + 1].startswith('--'):
            value = args_list[i + 1]
            i += 2
        else:
            # Bare flag
            value = True
            i += 1

        keys = key_path.split('.')
        current = overrides
        for key in keys[:-1]:
            if key not in current:
                current[key] = {}
            elif not isinstance(current[key], dict):
                raise ValueError(f"Conflicting CLI overrides: '{key_path}' conflicts with a parent key")
            current = current[key]

        current[keys[-1]] = auto_cast_value(value)

    return overrides


def setup_argparser():
    """Create and configure the argument parser."""
    parser = argparse.ArgumentParser(
        prog='quipsync',
        description='QuipSync - strict-JSON script and style generation',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run the HTTP service
  quipsync serve --port 8000

  # One script bundle, dramatic style
  quipsync complete --mode script --prompt "Story: ... Song: ..." --style dramatic

  # Prompt from a file, lower temperature for style mode
  quipsync complete --mode style --prompt-file samples.txt --completion.style.temperature 0.3

  # List style directives
  quipsync styles

Any config parameter from default_config.yaml can be overridden using dot notation: --section.key value
        """
    )
    parser.add_argument('--config', type=Path, default=None, help='YAML config file (packaged default if omitted)')
    sub = parser.add_subparsers(dest='command', required=True)

    serve = sub.add_parser('serve', help='Run the HTTP service with uvicorn')
    serve.add_argument('--host', default=None)
    serve.add_argument('--port', type=int, default=None)

    complete = sub.add_parser('complete', help='Run one completion and print the JSON document')
    complete.add_argument('--mode', required=True, choices=['script', 'style'])
    source = complete.add_mutually_exclusive_group(required=True)
    source.add_argument('--prompt')
    source.add_argument('--prompt-file', type=Path)
    complete.add_argument('--style', default=None, help='Style directive id (script mode)')
    complete.add_argument('--model', default=None, help='Model name or alias (sonnet, opus, haiku)')

    sub.add_parser('styles', help='List style directives')
    return parser


def load_config(config_path: Path | None, overrides: dict) -> AppConfig:
    config = AppConfig.from_yaml(config_path, overrides=overrides or None)
    return set_config(config)


def run_serve(config: AppConfig, args) -> int:
    import uvicorn
    from .server import create_app

    host = args.host or config.server.host
    port = args.port or config.server.port
    logger.bind(source="cli").info(f"Serving on http://{host}:{port}")
    uvicorn.run(create_app(config), host=host, port=port, log_level=config.telemetry.level.lower())
    return EXIT_OK


async def run_complete(config: AppConfig, args) -> int:
    log = logger.bind(source="cli")

    if args.prompt_file is not None:
        try:
            prompt = args.prompt_file.read_text(encoding="utf-8")
        except OSError as e:
            log.error(f"Cannot read prompt file: {e}")
            return EXIT_INPUT
    else:
        prompt = args.prompt

    if not config.anthropic.api_key:
        log.error("ANTHROPIC_API_KEY is not set")
        return EXIT_FAILED

    model = resolve_model(args.model or config.anthropic.model)
    async with AnthropicGateway(
        api_key=config.anthropic.api_key,
        default_model=model,
        timeout=config.anthropic.timeout,
    ) as gateway:
        service = CompletionService(StrictJSONCompleter(gateway, default_model=model), config)
        try:
            document = await service.complete(args.mode, prompt, args.style)
        except InputError as e:
            log.error(str(e))
            return EXIT_INPUT
        except CompletionError as e:
            log.error(f"Completion failed: {e}")
            return EXIT_FAILED

    print(json.dumps(document, indent=2, ensure_ascii=False))
    return EXIT_OK


def run_styles() -> int:
    for directive in STYLE_DIRECTIVES.values():
        print(f"{directive.id:<15} {directive.temperature:.1f}  {directive.name}")
    return EXIT_OK


def main(argv=None) -> int:
    """Main CLI entry point with configuration loading and command dispatch."""
    parser = setup_argparser()
    args, unknown = parser.parse_known_args(argv)

    try:
        cli_overrides = parse_cli_overrides(unknown)
    except ValueError as e:
        parser.error(str(e))

    try:
        config = load_config(args.config, cli_overrides)
    except FileNotFoundError as e:
        print(f"Config error: {e}", file=sys.stderr)
        return EXIT_INPUT
    except ValueError as e:
        print(f"Invalid config: {e}", file=sys.stderr)
        return EXIT_INPUT

    setup_logging(config.telemetry.level)
    if cli_overrides:
        log = logger.bind(source="cli")
        log.info("CLI overrides applied:")
        for key, value in cli_overrides.items():
            log.info(f"   {key}: {value}")

    if args.command == 'serve':
        return run_serve(config, args)
    if args.command == 'complete':
        return asyncio.run(run_complete(config, args))
    return run_styles()


def cli_main():
    """Synchronous entry point for console script."""
    sys.exit(main())


if __name__ == "__main__":
    cli_main()

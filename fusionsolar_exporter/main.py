# fusionsolar_exporter/main.py

import logging
import sys

from dotenv import load_dotenv

from .cli import build_parser
from .config import Config
from .errors import FusionSolarError
from .logging import ConsoleLog, StructuredLog
from .server import create_app
from .services.exporter import ExporterService
from .services.fs_api_client import FusionSolarAPIClient
from .services.output_formatter import emit_dump


def build_service(app_cfg, log) -> ExporterService:
    client = FusionSolarAPIClient(app_cfg.fusionsolar, log)
    structured_logger = StructuredLog(
        app_cfg.logging.structured_path,
        app_cfg.logging.structured_enabled,
    )
    return ExporterService(app_cfg, client, log, structured_log=structured_logger)


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    load_dotenv()
    app_cfg = Config.load(args.config)
    console_logger = ConsoleLog(
        level="DEBUG" if args.debug else app_cfg.logging.console_level,
        quiet=args.quiet or app_cfg.logging.console_quiet,
        debug_modules=app_cfg.logging.debug_modules,
    )
    log = console_logger.setup()
    if not args.debug:
        logging.getLogger("werkzeug").setLevel(logging.WARNING)

    service = build_service(app_cfg, log)

    if args.command == "serve":
        bind = args.bind or app_cfg.exporter.bind
        port = args.port or app_cfg.exporter.port
        log.info(
            "Serving metrics on http://%s:%s/metrics (refresh interval %ss)",
            bind,
            port,
            app_cfg.exporter.interval,
        )
        create_app(service, log).run(host=bind, port=port)
        return 0

    try:
        if args.command == "collect":
            print(service.collect_metrics(), end="")
        elif args.command == "dump-devices":
            emit_dump(service.dump_devices(), as_json=args.json)
        else:
            raise ValueError(f"Unsupported command: {args.command}")
    except FusionSolarError as exc:
        log.error("%s failed: %s", args.command, exc)
        return 2

    return 0


if __name__ == "__main__":
    sys.exit(main())

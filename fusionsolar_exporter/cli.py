# fusionsolar_exporter/cli.py
import argparse

def build_parser():
    parser = argparse.ArgumentParser(
        prog="fusionsolar-exporter",
        description="Prometheus exporter for the Huawei FusionSolar northbound API"
    )

    parser.add_argument(
        "--config",
        default=None,
        help="Optional INI config file (FS_* environment variables take precedence)"
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable verbose debug logging"
    )

    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress log output on stdout"
    )

    parser.add_argument(
        "--json",
        action="store_true",
        help="Emit JSON instead of human-readable text (dump-devices)"
    )

    sub = parser.add_subparsers(dest="command", required=True)

    cmd_serve = sub.add_parser("serve", help="Serve /metrics and /dump-devices over HTTP")
    cmd_serve.add_argument(
        "--bind",
        help="Override listen address (FS_BIND)",
    )
    cmd_serve.add_argument(
        "--port",
        type=int,
        help="Override listen port (FS_PORT)",
    )

    # One-shot collection, ignores the refresh interval
    sub.add_parser("collect", help="Run one collection cycle and print the metrics")

    sub.add_parser(
        "dump-devices",
        help="Print raw per-device-type telemetry for discovering new fields",
    )

    return parser

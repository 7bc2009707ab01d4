"""trustpolicy command line interface."""
from __future__ import annotations

import argparse
import json
import logging
import logging.handlers
import sys
from pathlib import Path
from typing import List, Sequence

from . import __version__
from .config import load_config
from .core.injection import create_default_container
from .core.interfaces import InstanceOutcome, SpawnResult
from .core.resilience import summarize
from .policy.installer import FirefoxPolicyInstaller
from .utils.certificates import CertificateEncodingError, load_certificate

_LOG_DIR = Path.home() / ".trustpolicy" / "logs"

EXIT_OK = 0
EXIT_INSTANCE_FAILED = 1
EXIT_BAD_CERTIFICATE = 2


def configure_logging(level: int = logging.INFO, log_dir: Path = _LOG_DIR) -> None:
    """Configure logging for the application.

    Logs are written to ~/.trustpolicy/logs/trustpolicy.log with automatic
    rotation at 5MB and 3 backup files retained.
    """
    formatter = logging.Formatter(
        fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handlers: List[logging.Handler] = []

    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_dir / "trustpolicy.log",
            maxBytes=5 * 1024 * 1024,  # 5 MB
            backupCount=3,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        file_handler.setLevel(level)
        handlers.append(file_handler)
    except OSError as exc:
        sys.stderr.write(f"Cannot write log file in {log_dir}: {exc}\n")

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    console_handler.setLevel(logging.DEBUG if level <= logging.DEBUG else logging.WARNING)
    handlers.append(console_handler)

    logging.basicConfig(level=level, handlers=handlers, force=True)


def parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="trustpolicy",
        description="Install or remove the Firefox enterprise root trust policy",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s install --cert root-ca.crt --host localhost
  %(prog)s install --cert root-ca.pem --alt-policy
  %(prog)s status --json
  %(prog)s uninstall
""",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--app-name",
        type=str,
        help="Name used for the installed certificate and auto-config files",
    )
    parser.add_argument(
        "--cert-dir",
        type=Path,
        help="Directory receiving the certificate on Linux",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    install = commands.add_parser("install", help="Install trust for a root certificate")
    install.add_argument(
        "--cert",
        type=Path,
        required=True,
        help="Root certificate in PEM or DER form",
    )
    install.add_argument(
        "--host",
        dest="hosts",
        action="append",
        default=[],
        help="Host name allowed by the auto-config script (repeatable)",
    )
    install.add_argument(
        "--alt-policy",
        action="store_true",
        help="Also set the registry/preference marker where supported",
    )

    commands.add_parser("uninstall", help="Remove installed trust where possible")

    status = commands.add_parser("status", help="Show what is installed for each browser")
    status.add_argument("--json", action="store_true", help="Print the status as JSON")

    return parser.parse_args(argv)


def _print_outcomes(action: str, outcomes: Sequence[InstanceOutcome]) -> None:
    for outcome in outcomes:
        state = "ok" if outcome.success else "FAILED"
        line = f"{action} {outcome.instance.name} ({outcome.instance.path}): {outcome.strategy.value} {state}"
        if outcome.message:
            line += f" - {outcome.message}"
        if outcome.restart in (SpawnResult.SKIPPED, SpawnResult.FAILED):
            line += " - restart required"
        print(line)
    stats = summarize(outcomes)
    print(f"{stats['succeeded']}/{stats['total']} browser installs processed successfully")


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)
    configure_logging(level=logging.DEBUG if args.debug else logging.INFO)
    logger = logging.getLogger(__name__)

    config = load_config(app_name=args.app_name, linux_cert_dir=args.cert_dir)
    installer = FirefoxPolicyInstaller(create_default_container(config), config=config)

    if args.command == "install":
        try:
            certificate = load_certificate(args.cert)
        except (OSError, CertificateEncodingError) as exc:
            logger.error("Cannot load certificate %s: %s", args.cert, exc)
            return EXIT_BAD_CERTIFICATE
        outcomes = installer.install(certificate, *args.hosts, alt_policy=args.alt_policy)
        _print_outcomes("install", outcomes)
    elif args.command == "uninstall":
        outcomes = installer.uninstall()
        _print_outcomes("uninstall", outcomes)
    else:
        report = installer.status()
        if args.json:
            print(json.dumps(report, indent=2))
        else:
            for entry in report:
                print(
                    f"{entry['name']} {entry['version'] or '?'} ({entry['path']}): "
                    f"{entry['strategy']}, installed={entry['has_policy']}"
                )
        return EXIT_OK

    if not outcomes:
        logger.warning("No Firefox installation was found")
    return EXIT_OK if all(o.success for o in outcomes) else EXIT_INSTANCE_FAILED

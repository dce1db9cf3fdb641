"""
Command line front end.

Usage:
    python run_baremetal.py poweron --name master-0
    python run_baremetal.py powerstatus --labels host-group=control-plane --format json
    python run_baremetal.py remotedirect --name master-0 --iso-url http://img/os.iso
"""

import argparse
import logging
import sys
from typing import List, Optional

from .config import AppConfig, load_environment, setup_logging, validate_config
from .errors import BaremetalError, BatchOperationError, OperationCancelledError
from .formatters import BatchReportFormatter
from .inventory import HostSelector, initialize_inventory
from .models import ManagementConfig
from .redfish import OperationContext
from .services import BaremetalOperation, BatchOptions, BatchRunner

logger = logging.getLogger(__name__)

# sub-command -> operation
COMMANDS = {
    "poweron": (BaremetalOperation.POWER_ON, "Power on selected hosts"),
    "poweroff": (BaremetalOperation.POWER_OFF, "Force selected hosts off"),
    "reboot": (BaremetalOperation.REBOOT, "Power cycle selected hosts"),
    "ejectmedia": (BaremetalOperation.EJECT_VIRTUAL_MEDIA, "Eject all virtual media from selected hosts"),
    "powerstatus": (BaremetalOperation.POWER_STATUS, "Show power state of selected hosts"),
    "remotedirect": (BaremetalOperation.REMOTE_DIRECT, "Boot selected hosts from a remote ISO image"),
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=AppConfig.APP_NAME,
        description=AppConfig.APP_DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Power on one host
  python run_baremetal.py poweron --name master-0

  # Power state of every control plane host, as JSON
  python run_baremetal.py powerstatus --labels host-group=control-plane --format json

  # Boot a host from an ISO image
  python run_baremetal.py remotedirect --name master-0 --iso-url http://img/os.iso

  # Read hosts from local documents instead of Kubernetes
  python run_baremetal.py reboot --documents ./site/hosts.yaml --name worker-0
        """
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {AppConfig.APP_VERSION}")

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True

    for command, (operation, help_text) in COMMANDS.items():
        sub = subparsers.add_parser(command, help=help_text, description=help_text)
        _add_common_arguments(sub)
        if operation is BaremetalOperation.REMOTE_DIRECT:
            sub.add_argument(
                "--iso-url",
                required=True,
                help="URL of the ISO image to boot from"
            )

    return parser


def _add_common_arguments(parser: argparse.ArgumentParser):
    parser.add_argument(
        "--name", "-n",
        help="Select the host with this name"
    )

    parser.add_argument(
        "--labels", "-l",
        help="Select hosts by labels (e.g., host-group=control-plane,rack=r1)"
    )

    parser.add_argument(
        "--documents", "-d",
        help="YAML file or directory with BareMetalHost and Secret documents "
             "(default: BMC_DOCUMENTS_PATH, then Kubernetes)"
    )

    parser.add_argument(
        "--management-type",
        help="Management driver type (default: BMC_MANAGEMENT_TYPE or 'redfish')"
    )

    parser.add_argument(
        "--insecure",
        action="store_true",
        default=None,
        help="Skip TLS certificate verification of BMCs"
    )

    parser.add_argument(
        "--use-proxy",
        action="store_true",
        default=None,
        help="Honour HTTP(S)_PROXY when talking to BMCs"
    )

    parser.add_argument(
        "--retries",
        type=int,
        help="System action retries (default: BMC_SYSTEM_ACTION_RETRIES or 30)"
    )

    parser.add_argument(
        "--delay",
        type=int,
        help="Seconds between polls (default: BMC_SYSTEM_REBOOT_DELAY or 30)"
    )

    parser.add_argument(
        "--timeout",
        type=float,
        help="Give up on the whole operation after this many seconds"
    )

    parser.add_argument(
        "--max-concurrency",
        type=int,
        help="Maximum hosts processed at once (default: all)"
    )

    parser.add_argument(
        "--format", "-f",
        choices=["list", "table", "json"],
        default=AppConfig.DEFAULT_OUTPUT_FORMAT,
        help="Output format: list (default), table, or json"
    )

    parser.add_argument(
        "--env-file", "-e",
        help="Path to .env file with settings"
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging"
    )


def build_selector(args: argparse.Namespace) -> HostSelector:
    """Selector from --name / --labels (no flags selects every host)"""
    selector = HostSelector()
    if args.name:
        selector = selector.with_name(args.name)
    if args.labels:
        selector = selector.with_labels(args.labels)
    return selector


def main(argv: Optional[List[str]] = None) -> int:
    """
    Run the command line.

    Returns:
        Process exit code
    """
    args = build_parser().parse_args(argv)

    if args.env_file:
        load_environment(args.env_file)
    setup_logging(verbose=args.verbose)

    operation, _ = COMMANDS[args.command]
    formatter = BatchReportFormatter(output_format=args.format)
    ctx = OperationContext.background()

    try:
        validate_config(args.documents)
        management_config = ManagementConfig.from_env().with_overrides(
            type=args.management_type,
            insecure=args.insecure,
            use_proxy=args.use_proxy,
            system_action_retries=args.retries,
            system_reboot_delay=args.delay,
        )
        inventory = initialize_inventory(args.documents, management_config)
    except (BaremetalError, ValueError) as e:
        logger.error(f"Failed to initialize inventory: {e}")
        print(f"\n❌ Error initializing inventory: {e}", file=sys.stderr)
        print("\nPlease check your .env configuration and the host documents.", file=sys.stderr)
        return 1

    options = BatchOptions(
        max_concurrency=args.max_concurrency,
        iso_url=getattr(args, "iso_url", None),
        timeout=args.timeout,
    )

    try:
        result = BatchRunner(inventory).run(ctx, operation, build_selector(args), options)
    except BatchOperationError as e:
        print(formatter.format(e.result))
        print(f"\n❌ {operation.value} failed on {len(e.failures)} host(s)", file=sys.stderr)
        return 1
    except OperationCancelledError as e:
        print(f"\n❌ {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        ctx.cancel()
        print("\n\nOperation cancelled by user.", file=sys.stderr)
        return 130
    except BaremetalError as e:
        logger.error(f"{operation.value} failed: {e}")
        print(f"\n❌ {e}", file=sys.stderr)
        return 1
    finally:
        inventory.close()

    print(formatter.format(result))
    return 0


if __name__ == "__main__":
    sys.exit(main())

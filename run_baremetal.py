#!/usr/bin/env python3
"""
Baremetal Remote Management

Drives the BMCs of baremetal hosts through Redfish.
Features:
- Power on / off / reboot and power status
- Virtual media eject and remote direct boot from an ISO image
- Host selection by name or labels from YAML documents or Kubernetes
- Dell iDRAC support (BMC_MANAGEMENT_TYPE=redfish-dell)

Architecture:
- Strategy Pattern for vendor clients
- Factory Pattern for creating clients
- Facade Pattern for the batch runner
- Value Object Pattern for data models

Usage:
    python run_baremetal.py powerstatus                         # All hosts
    python run_baremetal.py poweron --name master-0             # One host
    python run_baremetal.py reboot --labels host-group=workers  # By label
    python run_baremetal.py remotedirect --name master-0 --iso-url http://img/os.iso
"""

import sys

from bmctl.cli import main


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\n\nOperation cancelled by user.")
        sys.exit(130)

#!/usr/bin/env python3
"""
Order Flow Monitor Entry Point

Run this script to start the monitor.
"""

import sys

from orderflow_monitor.monitor import OrderFlowMonitor


def main():
    """Main entry point."""
    print("=" * 70)
    print("Order Flow Monitor")
    print("=" * 70)

    monitor = OrderFlowMonitor()

    if not monitor.initialize():
        print("Failed to initialize monitor. Check logs.")
        sys.exit(1)

    if not monitor.start():
        print("Failed to start monitor. Check logs.")
        sys.exit(1)

    try:
        monitor.run()
    except KeyboardInterrupt:
        print("\nReceived interrupt signal, shutting down...")
    finally:
        monitor.stop()
        print("Monitor stopped")


if __name__ == "__main__":
    main()

"""
Entry point for running as module: python -m romtracker
"""

import sys

from .monitor import setup_runtime_monitor, monitor_action


def main():
    """Main entry point"""
    logger = setup_runtime_monitor()
    monitor_action("startup: module entry", logger=logger)

    mode = 'web' if '--web' in sys.argv else 'cli'
    monitor_action(f'mode selected: {mode}', logger=logger)

    from .cli import run_cli
    sys.exit(run_cli())


if __name__ == '__main__':
    main()

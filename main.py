#!/usr/bin/env python

import sys


def main():
    """Main entry point - runs the HTTP service when no command is given"""
    from iptv_automation.cli import main as cli_main

    argv = sys.argv[1:] or ["serve"]
    sys.exit(cli_main(argv))


if __name__ == "__main__":
    main()

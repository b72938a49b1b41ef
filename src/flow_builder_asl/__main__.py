"""
Entry point for the flow_builder_asl package.

This allows the package to be executed as:
    python -m flow_builder_asl
"""

import sys
from colorama import Style, Fore
from .builder_main import FlowBuilderInterface


def main():
    try:
        FlowBuilderInterface().run()
    except Exception as e:
        print(f"{Fore.RED}Fatal error initializing Flow Builder: {e}{Style.RESET_ALL}")
        import traceback
        traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()

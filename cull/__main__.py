"""
Allow running the package with: python -m cull

By default, launches the command-line scanner. Use 'serve' for the API server.

Examples:
    python -m cull /path/to/photos         # CLI with path
    python -m cull cli /path/to/photos     # CLI (explicit)
    python -m cull serve --port 8080       # Launch the API server
    python -m cull config --init           # Create example config file
"""

import sys


def main():
    if len(sys.argv) > 1 and sys.argv[1] == 'serve':
        # Remove 'serve' from argv so argparse in app.py doesn't see it
        sys.argv.pop(1)
        from .app import main as serve_main
        serve_main()
    elif len(sys.argv) > 1 and sys.argv[1] == 'config':
        sys.argv.pop(1)
        from .user_config import get_user_config

        config = get_user_config()

        if '--init' in sys.argv or '-i' in sys.argv:
            # Create example config file
            if config.create_example_config():
                print("Created example configuration file at:")
                print(f"  {config.config_file_path}")
                print("\nEdit this file to customize Cull settings.")
            else:
                print("Failed to create configuration file.")
                sys.exit(1)
        else:
            # Show current config path and values
            print(f"Configuration file: {config.config_file_path}")
            if config.config_file_path.exists():
                print("Status: found")
            else:
                print("Status: not found (using defaults)")
                print("\nRun 'python -m cull config --init' to create one.")

            print("\nCurrent settings:")
            for key, value in config.as_dict().items():
                print(f"  {key}: {value}")
    else:
        if len(sys.argv) > 1 and sys.argv[1] == 'cli':
            sys.argv.pop(1)
        from .cli import main as cli_main
        sys.exit(cli_main())


if __name__ == '__main__':
    main()

"""
CLI Subpackage.

Contains the application entry-point and command handlers for the command-line interface.

Modules:
    - ``__main__``: The argparse definition and dispatcher.
    - ``commands``: Facade for the command handlers.
    - ``handlers/*``: Implementation modules for specific CLI actions (migrate, scan).
"""

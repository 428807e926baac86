"""
PatraKosh Client - CLI Mode Module

Implements command-line interface mode for headless/scripted use.
Uses the stored session, runs one command and logs to a timestamped file.

Author: PatraKosh Project
"""

import sys
import logging
import argparse
from getpass import getpass
from pathlib import Path
from typing import Optional

from managers import ConfigManager, SessionManager
from managers.log_manager import (
    LOG_FORMAT,
    LOG_DATE_FORMAT,
    new_log_file,
    log_level,
    cleanup_old_logs
)
from models import format_bytes, display_mime_type, display_user_name, summarize_stats
from api import PatraKoshAPI
from exceptions import PatraKoshAPIError
from operations import (
    SyncController,
    TransferHelper,
    AuthOperations,
    safe_filename,
    LOGIN_FAILED,
    SIGNUP_FAILED
)


# Exit codes
EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_CONFIG_ERROR = 2
EXIT_AUTH_ERROR = 3

AUTH_COMMANDS = ("login", "signup", "logout", "whoami")


def setup_cli_logging(config_manager: ConfigManager) -> Path:
    """
    Setup logging for CLI mode with timestamped log file.

    Writes logs/patrakosh-YYYY-MM-DD-HH-MM-SS.log next to config.json.
    Console output goes to stderr so stdout carries only command results.

    Args:
        config_manager: ConfigManager instance for log settings

    Returns:
        Path to the created log file
    """
    log_file = new_log_file()

    logging.basicConfig(
        level=log_level(config_manager),
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        handlers=[
            logging.FileHandler(log_file),
            logging.StreamHandler(sys.stderr)
        ]
    )

    logger = logging.getLogger(__name__)
    logger.debug(f"PatraKosh CLI Mode - Log file: {log_file}")
    return log_file


def build_api(config_manager: ConfigManager, session: SessionManager) -> PatraKoshAPI:
    """Create an API client from configuration, reading the token from session."""
    return PatraKoshAPI(
        config_manager.get("server_url"),
        config_manager.get("server_port"),
        api_prefix=config_manager.get("api_prefix", "/api"),
        verify_ssl=config_manager.get("verify_ssl", False),
        timeout=config_manager.get("request_timeout", 30),
        download_timeout=config_manager.get("download_timeout", 300),
        token_provider=session.get_token
    )


def add_cli_commands(subparsers):
    """Register the CLI subcommands on an argparse subparsers object."""
    login = subparsers.add_parser('login', help='Log in and store the session')
    login.add_argument('username', help='Username or email')

    signup = subparsers.add_parser('signup', help='Create an account and store the session')
    signup.add_argument('username')
    signup.add_argument('email')

    subparsers.add_parser('logout', help='Forget the stored session')
    subparsers.add_parser('whoami', help='Show the signed-in user')

    list_cmd = subparsers.add_parser('list', help='List files')
    list_cmd.add_argument('-q', '--query', default='', help='Search string')

    subparsers.add_parser('stats', help='Show file count and storage used')

    upload = subparsers.add_parser('upload', help='Upload a file')
    upload.add_argument('path', type=Path)

    delete = subparsers.add_parser('delete', help='Delete a file')
    delete.add_argument('file_id')

    rename = subparsers.add_parser('rename', help='Rename a file')
    rename.add_argument('file_id')
    rename.add_argument('name', nargs='?', help='New name (prompted for when omitted)')

    download = subparsers.add_parser('download', help='Download a file')
    download.add_argument('file_id')
    download.add_argument('-o', '--output', type=Path,
                          help='Destination folder or file (default: download_dir)')


def parse_file_id(raw: str):
    """Ids are numeric on the server; keep anything else as an opaque string."""
    return int(raw) if raw.isdigit() else raw


def print_view(controller: SyncController):
    view = controller.view
    for record in view.items:
        print(f"{record.id}\t{record.filename}\t{display_mime_type(record)}\t{format_bytes(record.file_size)}")
    if not view.items:
        print("No files found")
    print(summarize_stats(view.stats))


def run_auth_command(args: argparse.Namespace, auth: AuthOperations,
                     session: SessionManager) -> int:
    logger = logging.getLogger(__name__)

    if args.command == "logout":
        auth.logout()
        print("Logged out")
        return EXIT_SUCCESS

    if args.command == "whoami":
        if not session.is_authed():
            print("Not logged in")
            return EXIT_AUTH_ERROR
        print(f"Signed in as {display_user_name(session.get_user())}")
        return EXIT_SUCCESS

    if args.command == "login":
        password = getpass("Password: ")
        try:
            user = auth.login(args.username, password)
        except PatraKoshAPIError as e:
            logger.error(e.user_message(LOGIN_FAILED))
            return EXIT_AUTH_ERROR
    else:
        password = getpass("Password: ")
        confirm_password = getpass("Confirm password: ")
        try:
            user = auth.signup(args.username, args.email, password, confirm_password)
        except PatraKoshAPIError as e:
            logger.error(e.user_message(SIGNUP_FAILED))
            return EXIT_FAILURE

    print(f"Signed in as {display_user_name(user)}")
    return EXIT_SUCCESS


def run_file_command(args: argparse.Namespace, controller: SyncController) -> int:
    """
    Execute one file command through the sync controller.

    Returns:
        EXIT_SUCCESS, or EXIT_FAILURE with the controller's error message logged
    """
    logger = logging.getLogger(__name__)

    if args.command == "list":
        ok = controller.refresh(args.query)
        if ok:
            print_view(controller)
    elif args.command == "stats":
        ok = controller.initial_load()
        if ok:
            print(summarize_stats(controller.view.stats))
    elif args.command == "upload":
        ok = controller.upload(args.path)
    elif args.command == "delete":
        ok = controller.delete(parse_file_id(args.file_id))
    elif args.command == "rename":
        # The current name is needed to detect an unchanged rename
        ok = controller.initial_load()
        if ok:
            file_id = parse_file_id(args.file_id)
            if args.name is not None:
                ok = controller.rename(file_id, args.name)
            else:
                ok = controller.rename_with_prompt(
                    file_id, lambda current: input(f"Rename file to [{current}]: ")
                )
    elif args.command == "download":
        ok = controller.initial_load()
        if ok:
            file_id = parse_file_id(args.file_id)
            record = controller.view.find(file_id)
            suggested = record.filename if record else None
            save_path = args.output
            if save_path is not None and save_path.is_dir():
                save_path = save_path / safe_filename(suggested)
            saved = controller.download(file_id, suggested, save_path)
            ok = saved is not None
            if ok:
                print(f"Saved to {saved}")
    else:
        logger.error(f"Unknown command: {args.command}")
        return EXIT_FAILURE

    if not ok:
        logger.error(controller.state.error_message)
        return EXIT_FAILURE
    return EXIT_SUCCESS


def run_cli_command(args: argparse.Namespace, config_file: Optional[Path] = None) -> int:
    """
    Execute a CLI command without GUI.

    Process:
    1. Load configuration
    2. Setup logging to timestamped file
    3. Build API client, session and operations
    4. Run the requested command
    5. Return appropriate exit code

    Args:
        args: Parsed arguments with a "command" attribute
        config_file: Optional explicit config path

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    logger = None

    try:
        config_mgr = ConfigManager(config_file)
        config_mgr.load_config()
        log_file = setup_cli_logging(config_mgr)
        logger = logging.getLogger(__name__)
        cleanup_old_logs(config_mgr, log_file)

        if not config_mgr.get("server_url"):
            logger.error("server_url is not set in the configuration")
            return EXIT_CONFIG_ERROR

        session = SessionManager()
        api_client = build_api(config_mgr, session)

        try:
            if args.command in AUTH_COMMANDS:
                return run_auth_command(args, AuthOperations(api_client, session), session)

            if not session.is_authed():
                logger.error("Not logged in. Run 'patrakosh login <username>' first.")
                return EXIT_AUTH_ERROR

            controller = SyncController(
                api_client,
                transfer_helper=TransferHelper(api_client, config_mgr.get_download_dir())
            )
            return run_file_command(args, controller)
        finally:
            api_client.close()

    except KeyboardInterrupt:
        if logger:
            logger.warning("Operation cancelled by user (Ctrl+C)")
        else:
            print("\nOperation cancelled by user", file=sys.stderr)
        return EXIT_FAILURE

    except Exception as e:
        if logger:
            logger.exception(f"Unexpected error: {e}")
        else:
            print(f"Unexpected error: {e}", file=sys.stderr)
        return EXIT_FAILURE

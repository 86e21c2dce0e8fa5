#!/usr/bin/env python3
"""
canvaskit - Canvas LMS command line client

Lists courses, modules, assignments, grades and to-dos for the authenticated
Canvas user.

Usage:
    canvaskit courses                  # Active student courses
    canvaskit modules 12345            # Modules and their items
    canvaskit content 12345 678        # Resolve one module item
    canvaskit todos --verbose          # Enable debug logging

Environment Variables Required:
    CANVAS_DOMAIN           - Institution host (e.g., school.instructure.com)
    CANVAS_ACCESS_TOKEN     - Canvas API access token

Optional:
    CANVAS_TIMEOUT          - Per-request timeout in seconds (default 30)
    CANVAS_PAGE_SIZE        - Items requested per list call (default 100)
    LOG_LEVEL               - Logging level (default INFO)
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from .canvas.client import CanvasClient
from .canvas.errors import CanvasAPIError, ConfigurationError
from .config.settings import load_settings

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """
    Configure logging for the application.

    Args:
        verbose: If True, enable DEBUG level logging
    """
    level = logging.DEBUG if verbose else logging.INFO

    # Results go to stdout; keep log lines on stderr
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stderr),
        ],
    )

    # Reduce noise from external libraries
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("requests").setLevel(logging.WARNING)


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="canvaskit",
        description="Query the Canvas LMS REST API",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    canvaskit courses
    canvaskit assignments 12345
    canvaskit grades 12345 --env .env.local
        """,
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose/debug logging",
    )

    parser.add_argument(
        "--env",
        type=Path,
        help="Path to .env file (default: .env in current directory)",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("courses", help="List active student courses")
    commands.add_parser("todos", help="List assignments of every active course")

    for name, help_text in (
        ("modules", "List modules and their items"),
        ("assignments", "List assignments"),
        ("grades", "List your submissions and grades"),
    ):
        sub = commands.add_parser(name, help=help_text)
        sub.add_argument("course_id", type=int)

    content = commands.add_parser("content", help="Resolve the content of a module item")
    content.add_argument("course_id", type=int)
    content.add_argument("item_id", type=int)

    return parser.parse_args(argv)


def _format_date(value) -> str:
    return value.strftime("%Y-%m-%d %H:%M") if value else "-"


def run_command(client: CanvasClient, args: argparse.Namespace) -> int:
    """
    Execute one CLI command and print its results.

    Returns:
        Exit code
    """
    if args.command == "courses":
        for course in client.get_courses():
            term = f" [{course.term.name}]" if course.term else ""
            print(f"{course.id}\t{course.code}\t{course.name}{term}")

    elif args.command == "modules":
        for module in client.get_modules(args.course_id):
            print(f"{module.id}\t{module.name}")
            for item in module.items:
                print(f"  {item.id}\t{item.type}\t{'  ' * (item.indent or 0)}{item.title}")

    elif args.command == "assignments":
        for assignment in client.get_assignments(args.course_id):
            print(f"{assignment.id}\t{_format_date(assignment.due_at)}\t{assignment.name}")

    elif args.command == "grades":
        for grade in client.get_grades(args.course_id):
            score = "-" if grade.score is None else f"{grade.score:g}"
            print(f"{grade.assignment_id}\t{score}\t{grade.grade or '-'}\t{len(grade.comments)} comment(s)")

    elif args.command == "todos":
        for todo in client.get_todos():
            print(f"{todo.course_id}\t{_format_date(todo.due_at)}\t{todo.title}")

    elif args.command == "content":
        items = [
            item
            for module in client.get_modules(args.course_id)
            for item in module.items
            if item.id == args.item_id
        ]
        if not items:
            logger.error(f"Module item {args.item_id} not found in course {args.course_id}")
            return 1

        content = client.get_module_item_content(args.course_id, items[0])
        print(content.title)
        if content.url:
            print(content.url)
        if content.content or content.description:
            print()
            print(content.content or content.description)

    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """
    Main entry point.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    args = parse_args(argv)
    setup_logging(verbose=args.verbose)

    try:
        settings = load_settings(env_file=args.env)
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        logger.error("Please check your .env file or environment variables")
        return 1

    if not args.verbose:
        logging.getLogger().setLevel(settings.log_level)

    client = None
    try:
        client = CanvasClient(
            domain=settings.canvas.domain,
            access_token=settings.canvas.access_token,
            timeout=settings.canvas.timeout,
            page_size=settings.canvas.page_size,
        )
        return run_command(client, args)

    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return 1
    except CanvasAPIError as e:
        logger.error(f"Canvas API error: {e}")
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    finally:
        if client:
            client.close()


if __name__ == "__main__":
    sys.exit(main())

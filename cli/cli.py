# cli/cli.py
"""
Operator commands for the marketing site contact pipeline.
"""
from __future__ import annotations

import argparse
import os
import sys
from typing import Callable, Dict, Optional

import httpx
import uvicorn

from marketing_site.core.config import Settings
from marketing_site.core.exceptions import EmailTransportError
from marketing_site.services.email_composer import EmailAddress, compose_notification
from marketing_site.services.email_transport import SendGridTransport
from marketing_site.services.validation import Submission


def _supports_color() -> bool:
    """Check if terminal supports ANSI color codes."""
    if sys.platform == "win32":
        return os.getenv("TERM") == "xterm" or os.getenv("ANSICON") is not None
    return sys.stdout.isatty()


SUPPORTS_COLOR = _supports_color()

GREEN = '\033[92m' if SUPPORTS_COLOR else ''
RED = '\033[91m' if SUPPORTS_COLOR else ''
YELLOW = '\033[93m' if SUPPORTS_COLOR else ''
BLUE = '\033[94m' if SUPPORTS_COLOR else ''
RESET = '\033[0m' if SUPPORTS_COLOR else ''


def print_success(message: str):
    print(f"{GREEN}[✓]{RESET} {message}")


def print_error(message: str):
    print(f"{RED}[✗]{RESET} {message}")


def print_warning(message: str):
    print(f"{YELLOW}[!]{RESET} {message}")


def print_info(message: str):
    print(f"{BLUE}[i]{RESET} {message}")


def sample_submission() -> Submission:
    return Submission(
        first_name="Test",
        last_name="Submitter",
        email="test.submitter@example.com",
        company="Example Inc",
        phone="+1 (555) 123-4567",
        devices="11-50",
        message="This is a test demo request.\nPlease ignore.",
    )


def _redact(value: Optional[str]) -> str:
    if not value:
        return "(not set)"
    return f"{value[:4]}…{'*' * 8}"


def cmd_config(args: argparse.Namespace, settings: Settings) -> int:
    """Command: Show effective contact form configuration."""
    print_info(f"Environment: {settings.environment}")
    print_info(f"From: {settings.contact_from_name} <{settings.contact_from_email}>")
    print_info(f"To: {settings.contact_to_name} <{settings.contact_to_email}>")
    print_info(f"Confirmation email: {'on' if settings.contact_send_confirmation else 'off'}")
    print_info(
        f"Rate limit: {settings.contact_rate_limit_requests} per "
        f"{settings.contact_rate_limit_window_seconds}s"
        + (f", max {settings.contact_rate_limit_max_keys} clients" if settings.contact_rate_limit_max_keys else "")
    )
    print_info(f"SendGrid API key: {_redact(settings.sendgrid_api_key)}")

    if not settings.email_configured:
        print_warning("SENDGRID_API_KEY is not set - every submission will fail")
        return 1
    print_success("Email delivery configured")
    return 0


def cmd_preview(args: argparse.Namespace, settings: Settings) -> int:
    """Command: Print a sample notification email."""
    message = compose_notification(
        sample_submission(),
        sender=EmailAddress(settings.contact_from_email, settings.contact_from_name),
        recipient=EmailAddress(settings.contact_to_email, settings.contact_to_name),
        site_name=settings.site_name,
    )
    print(f"Subject: {message.subject}")
    print()
    print(message.html_body if args.html else message.text_body)
    return 0


def cmd_send_test(args: argparse.Namespace, settings: Settings) -> int:
    """Command: Send a sample notification through SendGrid."""
    recipient = EmailAddress(args.to or settings.contact_to_email, settings.contact_to_name)
    message = compose_notification(
        sample_submission(),
        sender=EmailAddress(settings.contact_from_email, settings.contact_from_name),
        recipient=recipient,
        site_name=settings.site_name,
    )

    print_info(f"Sending test notification to {recipient.email}...")
    try:
        SendGridTransport.from_settings(settings).send(message)
    except EmailTransportError as e:
        print_error(f"Send failed ({e.code}): {e.message}")
        provider_body = getattr(e, "provider_body", None)
        if provider_body:
            print_error(f"  Provider response: {provider_body}")
        return 1

    print_success("Test notification sent")
    return 0


def cmd_check_api(args: argparse.Namespace, settings: Settings) -> int:
    """Command: Check a running API's health endpoint."""
    url = f"{args.api_url.rstrip('/')}{settings.api_prefix}/health"
    print_info(f"Checking {url}...")
    try:
        response = httpx.get(url, timeout=args.timeout)
    except httpx.RequestError as e:
        print_error(f"API not accessible at {args.api_url}: {e}")
        return 1

    if response.status_code != 200:
        print_error(f"Health check failed with status {response.status_code}")
        return 1

    body = response.json()
    for name, check in body.get("checks", {}).items():
        check_status = check.get("status", "unknown")
        if check_status == "healthy":
            print_success(f"{name}: {check_status}")
        else:
            print_error(f"{name}: {check_status} {check.get('error', '')}".rstrip())

    if body.get("status") == "healthy":
        print_success("API healthy")
        return 0
    print_warning(f"API {body.get('status', 'unknown')}")
    return 1


def cmd_serve(args: argparse.Namespace, settings: Settings) -> int:
    """Command: Run the API under uvicorn."""
    host = args.host or settings.api_host
    port = args.port or settings.api_port
    print_info(f"Serving on http://{host}:{port}")
    uvicorn.run(
        "marketing_site.main:app",
        host=host,
        port=port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
    return 0


COMMANDS: Dict[str, Callable[[argparse.Namespace, Settings], int]] = {
    'config': cmd_config,
    'preview': cmd_preview,
    'send-test': cmd_send_test,
    'check-api': cmd_check_api,
    'serve': cmd_serve,
}


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser with all commands."""
    parser = argparse.ArgumentParser(
        description='Marketing site contact form CLI',
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest='command', help='Command to execute')

    subparsers.add_parser('config', help='Show effective contact form configuration')

    preview_parser = subparsers.add_parser('preview', help='Print a sample notification email')
    preview_parser.add_argument('--html', action='store_true', help='Print the HTML body instead of text')

    send_parser = subparsers.add_parser('send-test', help='Send a sample notification')
    send_parser.add_argument('--to', default=None, help='Override the recipient address')

    api_parser = subparsers.add_parser('check-api', help='Check a running API')
    api_parser.add_argument('--api-url', default='http://localhost:8000', help='API URL')
    api_parser.add_argument('--timeout', type=float, default=5.0, help='Request timeout in seconds')

    serve_parser = subparsers.add_parser('serve', help='Run the API server')
    serve_parser.add_argument('--host', default=None, help='Bind address (default: API_HOST)')
    serve_parser.add_argument('--port', type=int, default=None, help='Bind port (default: API_PORT)')

    return parser


def main(args: Optional[list] = None, settings: Optional[Settings] = None) -> int:
    """Main CLI entry point."""
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    if not parsed_args.command:
        parser.print_help()
        return 1

    command_func = COMMANDS[parsed_args.command]

    try:
        return command_func(parsed_args, settings or Settings())
    except KeyboardInterrupt:
        print_error("\nInterrupted by user")
        return 130


if __name__ == '__main__':
    sys.exit(main())

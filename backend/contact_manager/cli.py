"""CLI for serving the API, running migrations and submitting contacts."""
import argparse
import sys
from pathlib import Path
from typing import Optional

import httpx
from alembic import command
from alembic.config import Config

from contact_manager.client.controller import ContactFormController
from contact_manager.core.config import Settings, get_settings
from contact_manager.core.logging_config import LoggingConfig

BACKEND_DIR = Path(__file__).resolve().parents[1]
ALEMBIC_INI = BACKEND_DIR / "alembic.ini"

# CLI flag -> wire field
CONTACT_OPTIONS = {
    "first_name": "firstName",
    "last_name": "lastName",
    "email": "email",
    "zipcode": "zipcode",
    "vampire": "isAVampire",
    "age": "age",
}


def alembic_config(database_url: Optional[str] = None) -> Config:
    """Alembic config bound to the backend migration scripts"""
    cfg = Config(str(ALEMBIC_INI))
    cfg.set_main_option("script_location", str(BACKEND_DIR / "alembic"))
    if database_url:
        cfg.set_main_option("sqlalchemy.url", database_url)
    # Logging is set up by LoggingConfig, not alembic.ini
    cfg.attributes["logging_configured"] = True
    return cfg


def _settings(args) -> Settings:
    settings = get_settings()
    LoggingConfig.configure(settings)
    return settings


def cmd_serve(args):
    """Run the API with uvicorn."""
    import uvicorn

    settings = _settings(args)
    uvicorn.run(
        "main:app",
        app_dir=str(BACKEND_DIR),
        host=args.host or settings.api_host,
        port=args.port or settings.api_port,
        reload=args.reload,
    )
    return 0


def cmd_migrate(args):
    """Upgrade the database to a revision (head by default)."""
    settings = _settings(args)
    print(f"Applying migrations up to {args.revision}")
    command.upgrade(alembic_config(settings.sqlalchemy_url), args.revision)
    return 0


def cmd_rollback(args):
    """Downgrade the database to a revision."""
    settings = _settings(args)
    print(f"Rolling back to {args.revision}")
    command.downgrade(alembic_config(settings.sqlalchemy_url), args.revision)
    return 0


def cmd_stamp(args):
    """Stamp alembic revision without running migrations."""
    settings = _settings(args)
    command.stamp(alembic_config(settings.sqlalchemy_url), args.revision)
    return 0


def cmd_add_contact(args):
    """Submit one contact through the form controller."""
    settings = _settings(args)
    base_url = args.api_url or settings.api_base_url

    with httpx.Client(base_url=base_url, timeout=10.0) as http_client:
        controller = ContactFormController(http_client)
        for option, wire_field in CONTACT_OPTIONS.items():
            value = getattr(args, option)
            if value is not None:
                controller.change(wire_field, value)
        state = controller.submit()

    if state.banner:
        print(state.banner, file=sys.stderr)
        return 1
    if state.errors:
        for label, messages in state.errors.items():
            for message in messages:
                print(f"{label} {message}", file=sys.stderr)
        return 1

    contact = state.last_created
    if contact is None:
        print("Created contact")
        return 0
    print(f"Created contact {contact.get('id')}: {contact.get('firstName')} {contact.get('lastName')}")
    return 0


def build_parser():
    p = argparse.ArgumentParser(prog="contact-manager")
    sub = p.add_subparsers(dest="cmd")

    s = sub.add_parser("serve", help="Run the HTTP API")
    s.add_argument("--host", default=None)
    s.add_argument("--port", type=int, default=None)
    s.add_argument("--reload", action="store_true")
    s.set_defaults(func=cmd_serve)

    s = sub.add_parser("migrate", help="Run migrations (upgrade head)")
    s.add_argument("--revision", "-r", default="head", help="Target revision")
    s.set_defaults(func=cmd_migrate)

    s = sub.add_parser("rollback", help="Downgrade migrations")
    s.add_argument("--revision", "-r", default="-1", help="Target revision")
    s.set_defaults(func=cmd_rollback)

    s = sub.add_parser("stamp", help="Stamp alembic to a revision")
    s.add_argument("--revision", "-r", help="Revision to stamp", default="head")
    s.set_defaults(func=cmd_stamp)

    s = sub.add_parser("add-contact", help="Submit a contact to a running API")
    s.add_argument("--first-name", dest="first_name")
    s.add_argument("--last-name", dest="last_name")
    s.add_argument("--email")
    s.add_argument("--zipcode")
    s.add_argument("--vampire", choices=["true", "false"])
    s.add_argument("--age")
    s.add_argument("--api-url", dest="api_url", help="Base URL of the API")
    s.set_defaults(func=cmd_add_contact)
    return p


def main(argv=None):
    p = build_parser()
    args = p.parse_args(argv)
    if not hasattr(args, "func"):
        p.print_help()
        return 2
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())

# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Command-line administration of the catalog and tenant flags.

Usage:
    featurizer init-db
    featurizer list [--tenant acme] [--format table|json]
    featurizer get hiveit login sso --tenant acme
    featurizer enable hiveit login --tenant acme
    featurizer register hiveit login sso
    featurizer update hiveit login sso --title "Single sign-on"

Every command runs against the database backend. ``--database-url``
overrides the configured connection.
"""

import argparse
import asyncio
import json
import sys
from dataclasses import asdict

from featurizer.config import get_settings
from featurizer.errors import FeaturizerError, NotRegisteredError
from featurizer.keys import normalize_key, normalize_part
from featurizer.logging_config import bind_context, configure_logging
from featurizer.services.feature_service import FeatureService
from featurizer.services.overrides import settings_override
from featurizer.stores.backends import DatabaseBackend, UnitOfWork, create_backend


def _format_table(headers: list[str], rows: list[list[str]]) -> str:
    widths = [len(h) for h in headers]
    for row in rows:
        widths = [max(w, len(cell)) for w, cell in zip(widths, row)]

    border = "+" + "+".join("-" * (w + 2) for w in widths) + "+"

    def line(cells: list[str]) -> str:
        return "| " + " | ".join(c.ljust(w) for c, w in zip(cells, widths)) + " |"

    out = [border, line(headers), border]
    out.extend(line(row) for row in rows)
    out.append(border)
    return "\n".join(out)


def _target_label(args: argparse.Namespace) -> str:
    if args.feature:
        return f"The feature: {normalize_key(args.feature)}"
    return f"The features in the group: {normalize_key(args.group)}"


def _verb(args: argparse.Namespace) -> str:
    return "is" if args.feature else "are"


async def cmd_list(service: FeatureService, uow: UnitOfWork, args: argparse.Namespace) -> int:
    if args.tenant:
        tenant = uow.tenant(normalize_part("tenant", args.tenant))
        rows = [asdict(row) for row in await service.list_all(tenant)]
        columns = ["vendor", "group", "feature", "enabled"]
    else:
        rows = [asdict(row) for row in await service.list_catalog()]
        columns = ["vendor", "group", "feature", "teaser_title"]

    if args.format == "json":
        print(json.dumps(rows, indent=2))
    else:
        cells = [[str(row[c]).lower() if c == "enabled" else str(row[c]) for c in columns] for row in rows]
        print(_format_table(columns, cells))
    return 0


async def cmd_get(service: FeatureService, uow: UnitOfWork, args: argparse.Namespace) -> int:
    tenant = uow.tenant(normalize_part("tenant", args.tenant))
    try:
        enabled = await service.check(args.vendor, args.group, args.feature, tenant=tenant)
    except NotRegisteredError:
        print("Warning: undefined")
        return 0
    print(f"Success: {str(enabled).lower()}")
    return 0


async def cmd_enable(service: FeatureService, uow: UnitOfWork, args: argparse.Namespace) -> int:
    tenant = uow.tenant(normalize_part("tenant", args.tenant))
    await service.enable(args.vendor, args.group, args.feature, tenant=tenant)
    print(f"Success: {_target_label(args)} for {tenant.tenant_id} {_verb(args)} successfully enabled.")
    return 0


async def cmd_disable(service: FeatureService, uow: UnitOfWork, args: argparse.Namespace) -> int:
    tenant = uow.tenant(normalize_part("tenant", args.tenant))
    await service.disable(args.vendor, args.group, args.feature, tenant=tenant)
    print(f"Success: {_target_label(args)} for {tenant.tenant_id} {_verb(args)} successfully disabled.")
    return 0


async def cmd_register(service: FeatureService, uow: UnitOfWork, args: argparse.Namespace) -> int:
    created = await service.register(args.vendor, args.group, args.feature)
    if created:
        print(f"Success: Registered {args.vendor}/{args.group}/{args.feature}.")
    else:
        print(f"Warning: {args.vendor}/{args.group}/{args.feature} is already registered.")
    return 0


async def cmd_update(service: FeatureService, uow: UnitOfWork, args: argparse.Namespace) -> int:
    await service.update_metadata(
        args.vendor,
        args.group,
        args.feature,
        title=args.title,
        html=args.html,
        url=args.url,
    )
    print(f"Success: Updated metadata of {args.vendor}/{args.group}/{args.feature}.")
    return 0


COMMANDS = {
    "list": cmd_list,
    "get": cmd_get,
    "enable": cmd_enable,
    "disable": cmd_disable,
    "register": cmd_register,
    "update": cmd_update,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="featurizer",
        description="Manage the feature catalog and per-tenant feature flags",
    )
    parser.add_argument(
        "--database-url",
        help="SQLAlchemy async URL (default: from FEATURIZER_* settings)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="Create the catalog and tenant tables")

    p_list = sub.add_parser("list", help="List registered features")
    p_list.add_argument("--tenant", help="Include the enablement of this tenant")
    p_list.add_argument("--format", choices=["table", "json"], default="table")

    for name, help_text in (
        ("get", "Show whether a feature or group is enabled"),
        ("enable", "Enable a feature, or every feature of a group"),
        ("disable", "Disable a feature, or every feature of a group"),
    ):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("vendor")
        p.add_argument("group")
        p.add_argument("feature", nargs="?", default=None, help="Omit to target the whole group")
        p.add_argument("--tenant", required=True)

    p_register = sub.add_parser("register", help="Register a feature in the catalog")
    for name in ("vendor", "group", "feature"):
        p_register.add_argument(name)

    p_update = sub.add_parser("update", help="Replace the teaser metadata of a feature")
    for name in ("vendor", "group", "feature"):
        p_update.add_argument(name)
    p_update.add_argument("--title", default="")
    p_update.add_argument("--html", default="")
    p_update.add_argument("--url", default="")

    return parser


async def run(args: argparse.Namespace) -> int:
    settings = get_settings()
    backend = create_backend(settings, database_url=args.database_url or settings.database_url)
    try:
        if args.command == "init-db":
            if isinstance(backend, DatabaseBackend):
                await backend.create_schema()
            print("Success: Database schema is ready.")
            return 0

        if getattr(args, "tenant", None):
            bind_context(tenant_id=args.tenant)
        handler = COMMANDS[args.command]
        async with backend.unit_of_work() as uow:
            service = FeatureService(uow.catalog, override=settings_override(settings))
            return await handler(service, uow, args)
    finally:
        await backend.shutdown()


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(log_format="text", stream=sys.stderr)

    try:
        return asyncio.run(run(args))
    except FeaturizerError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())

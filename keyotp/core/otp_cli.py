#!/usr/bin/env python3
"""
otp_cli.py — command line front end for keyotp.

Subcommands:
- gen    : show the current code of every stored secret
- add    : register a secret under a name
- del    : delete a secret
- list   : show stored names and their parameters
- uri    : print the otpauth:// URI of a secret
- serve  : run the HTTP API

Examples:
    keyotp add github JBSWY3DPEHPK3PXP
    keyotp add vpn --random --digits 8
    keyotp gen
    keyotp --backend sqlite --db ./secrets.db list
"""

import argparse
import logging
import sys
import time
from typing import List, Optional

from .. import config
from ..database import BackendKind, SecretStore, open_store
from . import otp_core
from .errors import OtpError
from .generation import GenerationOrchestrator

logger = logging.getLogger(__name__)


def _fail(action: str, error: Exception) -> int:
    print(f"Failed to {action}: {error}", file=sys.stderr)
    return 1


# --- CLI command handlers ---
def cmd_gen(store: SecretStore, args) -> int:
    try:
        results = GenerationOrchestrator(store).generate_all(clock=time.time)
    except OtpError as e:
        return _fail("generate the codes", e)

    print(f"{len(results)} secrets found")
    status = 0
    for result in results:
        if result.ok:
            print(f"{result.name:<35}: {result.code} (Validity: {result.seconds_remaining}s)")
        else:
            print(f"{result.name:<35}: Code generation error: {result.error}", file=sys.stderr)
            status = 1
    return status


def cmd_add(store: SecretStore, args) -> int:
    if args.random:
        secret = otp_core.generate_base32_secret()
    elif args.secret:
        secret = args.secret
    else:
        return _fail("add the secret", "a SECRET argument or --random is required")

    try:
        store.add(args.name, secret, digits=args.digits, period=args.period)
    except OtpError as e:
        return _fail("add the secret", e)

    print("Secret added")
    if args.random:
        print(f"Secret (Base32): {secret}")
    return 0


def cmd_del(store: SecretStore, args) -> int:
    try:
        store.remove(args.name)
    except OtpError as e:
        return _fail("delete the secret", e)
    print("Secret deleted")
    return 0


def cmd_list(store: SecretStore, args) -> int:
    try:
        entries = store.list()
    except OtpError as e:
        return _fail("list the secrets", e)
    for entry in entries:
        print(f"{entry.name:<35}: {entry.algorithm}, {entry.digits} digits, {entry.period}s")
    return 0


def cmd_uri(store: SecretStore, args) -> int:
    try:
        uri = otp_core.format_otpauth_uri(store.get(args.name), issuer=args.issuer)
    except OtpError as e:
        return _fail("build the URI", e)
    print(uri)
    return 0


def cmd_serve(store: SecretStore, args) -> int:
    from ..backend import create_app

    app = create_app(store)
    app.run(host=args.host, port=args.port)
    return 0


# --- Argparse builder ---
def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="keyotp", description="TOTP generator backed by the system keyring")
    p.add_argument("--backend", choices=[k.value for k in BackendKind],
                   help="Secret storage backend (env KEYOTP_BACKEND, default keyring)")
    p.add_argument("--db", help="SQLite file for the sqlite backend (env KEYOTP_DB)")
    p.add_argument("--service", help="Keyring service name (env KEYOTP_SERVICE)")
    p.add_argument("--timeout", type=float, help="Backend timeout in seconds (env KEYOTP_TIMEOUT)")
    p.add_argument("--verbose", action="store_true", help="Verbose output")
    sub = p.add_subparsers(dest="cmd", required=True)

    # gen
    pg = sub.add_parser("gen", help="Generate TOTP codes")
    pg.set_defaults(func=cmd_gen)

    # add
    pa = sub.add_parser("add", help="Register an account")
    pa.add_argument("name", help="Account name")
    pa.add_argument("secret", nargs="?", help="Base32 encoded secret")
    pa.add_argument("--random", action="store_true", help="Generate a new random secret")
    pa.add_argument("--digits", type=int, default=config.DEFAULT_DIGITS, help="Number of OTP digits")
    pa.add_argument("--period", type=int, default=config.DEFAULT_TIME_STEP, help="TOTP time step (seconds)")
    pa.set_defaults(func=cmd_add)

    # del
    pd = sub.add_parser("del", help="Delete an account")
    pd.add_argument("name", help="Account name")
    pd.set_defaults(func=cmd_del)

    # list
    pl = sub.add_parser("list", help="List stored accounts")
    pl.set_defaults(func=cmd_list)

    # uri
    pu = sub.add_parser("uri", help="Print the otpauth URI of an account")
    pu.add_argument("name", help="Account name")
    pu.add_argument("--issuer", help="Issuer label for the otpauth URI")
    pu.set_defaults(func=cmd_uri)

    # serve
    ps = sub.add_parser("serve", help="Run the HTTP API")
    ps.add_argument("--host", default="127.0.0.1")
    ps.add_argument("--port", type=int, default=5000)
    ps.set_defaults(func=cmd_serve)

    return p


def settings_from_args(args) -> config.Settings:
    settings = config.Settings.from_env()
    if args.backend:
        settings.backend = args.backend
    if args.db:
        settings.database_file = args.db
    if args.service:
        settings.keyring_service = args.service
    if args.timeout is not None:
        settings.timeout = args.timeout
    return settings


def main(argv: Optional[List[str]] = None, store: Optional[SecretStore] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="[%(levelname)s] %(message)s",
    )

    if store is None:
        try:
            store = open_store(settings_from_args(args))
        except (OtpError, ValueError) as e:
            return _fail("open the secret store", e)
    return args.func(store, args)


if __name__ == "__main__":
    sys.exit(main())

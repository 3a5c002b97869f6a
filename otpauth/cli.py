#!/usr/bin/env python3
"""
cli.py — command line front end for the otpauth core.

Subcommands:
- secret : create a new secret and print its otpauth URI
- code   : print the current TOTP code for a secret
- verify : validate a code (exit status 0 only on Success)
- uri    : print the otpauth URI and the hosted QR image URL
- qr     : save the enrollment QR code as a PNG file

--secret falls back to the OTPAUTH_SECRET environment variable so secrets do
not have to appear in shell history.
"""

import argparse
import logging
import os
import sys

from otpauth.otp_core import create_secret, totp
from otpauth.otpauth_uri import get_otp_auth_url, get_otp_qr_code_url
from otpauth.qr_code import DEFAULT_HEIGHT, DEFAULT_WIDTH, save_otp_qr_code_file
from otpauth.validator import ValidationOutcome, Validator

SECRET_ENV = "OTPAUTH_SECRET"
DEFAULT_NAME = "user@example"


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="[%(levelname)s] %(name)s: %(message)s",
    )


# --- CLI command handlers ---
def cmd_secret(args) -> int:
    secret = create_secret()
    print(f"Secret: {secret}")
    print(f"URI:    {get_otp_auth_url(args.name, secret)}")
    return 0


def cmd_code(args) -> int:
    try:
        code, remaining = totp(args.secret, args.timestamp)
    except ValueError as e:
        print(f"[!] {e}", file=sys.stderr)
        return 2
    print(f"TOTP: {code}  (valid ~{remaining:2d}s)")
    return 0


def cmd_verify(args) -> int:
    result = Validator().validate_code(args.secret, args.code, args.timestamp)
    print(result.value)
    return 0 if result is ValidationOutcome.SUCCESS else 1


def cmd_uri(args) -> int:
    print("otpauth URI:")
    print(get_otp_auth_url(args.name, args.secret))
    print("\nQR code URL:")
    print(get_otp_qr_code_url(args.name, args.secret))
    return 0


def cmd_qr(args) -> int:
    try:
        path = save_otp_qr_code_file(args.name, args.secret, args.output, args.width, args.height)
    except FileExistsError:
        print(f"[!] {args.output} already exists", file=sys.stderr)
        return 2
    print(f"QR code saved to {path}")
    return 0


# --- Argparse builder ---
def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="otpauth", description="TOTP (RFC6238, HMAC-SHA1) secret and code tool")
    sub = p.add_subparsers(dest="cmd", required=True)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--verbose", action="store_true", help="Debug logging")

    with_secret = argparse.ArgumentParser(add_help=False)
    with_secret.add_argument("--secret", default=os.environ.get(SECRET_ENV),
                             help=f"Base-32 secret (default: ${SECRET_ENV})")

    ps = sub.add_parser("secret", parents=[common], help="Create a new secret")
    ps.add_argument("--name", default=DEFAULT_NAME, help="Account label for the otpauth URI")
    ps.set_defaults(func=cmd_secret)

    pc = sub.add_parser("code", parents=[common, with_secret], help="Print the current TOTP code")
    pc.add_argument("--timestamp", type=int, help="Epoch milliseconds (default: now)")
    pc.set_defaults(func=cmd_code)

    pv = sub.add_parser("verify", parents=[common, with_secret], help="Validate a TOTP code")
    pv.add_argument("--code", required=True, help="Code to check")
    pv.add_argument("--timestamp", type=int, help="Epoch milliseconds (default: now)")
    pv.set_defaults(func=cmd_verify)

    pu = sub.add_parser("uri", parents=[common, with_secret], help="Print the otpauth URI")
    pu.add_argument("--name", default=DEFAULT_NAME)
    pu.set_defaults(func=cmd_uri)

    pq = sub.add_parser("qr", parents=[common, with_secret], help="Save the enrollment QR code as PNG")
    pq.add_argument("--name", default=DEFAULT_NAME)
    pq.add_argument("--output", required=True, help="PNG file to create")
    pq.add_argument("--width", type=int, default=DEFAULT_WIDTH)
    pq.add_argument("--height", type=int, default=DEFAULT_HEIGHT)
    pq.set_defaults(func=cmd_qr)

    return p


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)
    if hasattr(args, "secret") and not args.secret:
        parser.error(f"--secret is required (or set {SECRET_ENV})")
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())

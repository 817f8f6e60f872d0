#!/usr/bin/env python3
"""
hotp_cli.py — CLI wrapper cho hotp.py

Cung cấp các subcommand:
- hotp   : sinh mã HOTP cho một counter
- verify : xác minh mã HOTP (có look-ahead)

Secret được truyền trực tiếp qua một trong các option --secret / --secret-hex /
--secret-b32 (CLI không lưu secret ra file).
"""

import argparse
import base64
import binascii
import logging
import sys

from . import hotp
from .errors import HOTPError, InvalidArgument
from .hmac_engine import get_engine

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_INVALID = 1
EXIT_ERROR = 2


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="[%(levelname)s] %(name)s: %(message)s",
    )


def _read_secret(args) -> bytes:
    """Chuyển secret từ option CLI sang bytes."""
    if args.secret_hex is not None:
        try:
            return bytes.fromhex(args.secret_hex)
        except ValueError as e:
            raise InvalidArgument("Invalid hex secret") from e
    if args.secret_b32 is not None:
        b32 = args.secret_b32.strip().replace(" ", "").upper()
        b32 += "=" * ((8 - len(b32) % 8) % 8)
        try:
            return base64.b32decode(b32, casefold=True)
        except binascii.Error as e:
            raise InvalidArgument("Invalid Base32 secret") from e
    return args.secret.encode("utf-8")


# --- CLI command handlers ---
def cmd_hotp(args) -> int:
    secret = _read_secret(args)
    engine = get_engine(args.backend)
    value = hotp.generate_hotp(
        secret, args.counter, args.digits, args.checksum, args.offset, engine=engine
    )
    code = hotp.format_otp(value, args.digits, args.checksum)
    print(f"HOTP({args.digits}d, counter={args.counter}): {code}")
    return EXIT_OK


def cmd_verify(args) -> int:
    secret = _read_secret(args)
    engine = get_engine(args.backend)
    ok, new_counter = hotp.verify_hotp(
        secret,
        args.code,
        args.counter,
        code_digits=args.digits,
        add_checksum=args.checksum,
        truncation_offset=args.offset,
        look_ahead=args.look_ahead,
        engine=engine,
    )
    if ok:
        print(f"[+] HOTP code is VALID (next counter = {new_counter})")
        return EXIT_OK
    print("[-] HOTP code is INVALID")
    return EXIT_INVALID


def cmd_help(args) -> int:
    print("'hotp-cli -h' for help.")
    return EXIT_OK


# --- Argparse builder ---
def _add_common_arguments(p: argparse.ArgumentParser) -> None:
    src = p.add_mutually_exclusive_group(required=True)
    src.add_argument("--secret", help="Shared secret as text (UTF-8)")
    src.add_argument("--secret-hex", help="Shared secret as hex")
    src.add_argument("--secret-b32", help="Shared secret as Base32")
    p.add_argument("--counter", type=int, required=True, help="Moving factor (0..2^64-1)")
    p.add_argument("--digits", type=int, default=hotp.DEFAULT_DIGITS,
                   help="Number of OTP digits, not counting the checksum (0..8)")
    p.add_argument("--checksum", action="store_true", help="Append a Luhn checksum digit")
    p.add_argument("--offset", type=int, default=hotp.DEFAULT_TRUNCATION_OFFSET,
                   help="Truncation offset 0..15; anything else uses dynamic truncation")
    p.add_argument("--backend", default=None,
                   help="HMAC backend: hashlib or cryptography (default: $HOTP_HMAC_BACKEND or hashlib)")
    p.add_argument("--verbose", action="store_true", help="Verbose output")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="hotp-cli", description="HOTP (RFC 4226) generator CLI")
    sub = p.add_subparsers(dest="cmd")
    p.set_defaults(func=cmd_help, verbose=False)

    # hotp
    ph = sub.add_parser("hotp", help="Generate HOTP code for a specific counter")
    _add_common_arguments(ph)
    ph.set_defaults(func=cmd_hotp)

    # verify
    pv = sub.add_parser("verify", help="Verify a HOTP code")
    _add_common_arguments(pv)
    pv.add_argument("--code", required=True, help="OTP code to verify")
    pv.add_argument("--look-ahead", type=int, default=hotp.DEFAULT_LOOK_AHEAD,
                    help="Allowed counter look-ahead (0..%d)" % hotp.MAX_LOOK_AHEAD)
    pv.set_defaults(func=cmd_verify)

    return p


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _setup_logging(args.verbose)
    try:
        return args.func(args)
    except HOTPError as e:
        logger.debug("command failed", exc_info=True)
        print(f"[!] {e}", file=sys.stderr)
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())

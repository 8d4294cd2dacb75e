"""
homing — command line entry point.

Usage:
    homing upload URL FILE... [--compress] [--ignore-missing] [--timeout S]
    homing broadcast MESSAGE [--address HOST:PORT] [--timeout S]
    homing encrypt PASSWORD SRC DST
    homing decrypt PASSWORD SRC DST
    homing shred PATH... [--force]

Every reported error is printed; the exit status is 1 if there were any.
"""

import argparse
import sys

from .client import post_files
from .config import DEFAULT_TIMEOUT, UDP_PORT
from .crypto import decrypt, encrypt
from .discovery import send_broadcast
from .errors import DecryptionError
from .logging_config import setup_logging
from .shred import srm
from .utils import deadline_in


def _report(errors) -> int:
    """Print each error as it arrives; return the number printed."""
    count = 0
    for err in errors:
        print(f"  [!] {err}")
        count += 1
    return count


def _cmd_upload(args) -> int:
    stream = post_files(
        args.url,
        args.files,
        deadline=deadline_in(args.timeout),
        ignore_file_open_error=args.ignore_missing,
        compress=args.compress,
    )
    failures = _report(stream)
    if not failures:
        print(f"  Uploaded {len(args.files)} file(s) to {args.url}")
    return failures


def _cmd_broadcast(args) -> int:
    stream = send_broadcast(
        args.address,
        args.message.encode("utf-8"),
        deadline=deadline_in(args.timeout),
    )
    failures = _report(stream)
    if not failures:
        print(f"  Broadcast sent on {args.address}")
    return failures


def _cmd_encrypt(args) -> int:
    with open(args.src, "rb") as f:
        data = f.read()
    with open(args.dst, "wb") as f:
        f.write(encrypt(args.password, data))
    return 0


def _cmd_decrypt(args) -> int:
    with open(args.src, "rb") as f:
        data = f.read()
    try:
        plaintext = decrypt(args.password, data)
    except DecryptionError as e:
        print(f"  [!] {e}")
        return 1
    with open(args.dst, "wb") as f:
        f.write(plaintext)
    return 0


def _cmd_shred(args) -> int:
    failures = 0
    for path in args.paths:
        try:
            srm(path, force=args.force)
        except OSError as e:
            print(f"  [!] {path}: {e}")
            failures += 1
    return failures


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="homing", description="Asset-tracking network client")
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING or ERROR")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("upload", help="Upload files to a collector")
    p.add_argument("url")
    p.add_argument("files", nargs="+")
    p.add_argument("--compress", action="store_true", help="gzip each file")
    p.add_argument(
        "--ignore-missing", action="store_true", help="Skip files that cannot be opened"
    )
    p.add_argument("--timeout", type=float, default=DEFAULT_TIMEOUT, help="Seconds until the deadline")
    p.set_defaults(func=_cmd_upload)

    p = sub.add_parser("broadcast", help="Announce on every broadcast-capable interface")
    p.add_argument("message")
    p.add_argument(
        "--address", default=f":{UDP_PORT}", help="host:port; the port is the destination port"
    )
    p.add_argument("--timeout", type=float, default=DEFAULT_TIMEOUT, help="Seconds until the deadline")
    p.set_defaults(func=_cmd_broadcast)

    for name, func in (("encrypt", _cmd_encrypt), ("decrypt", _cmd_decrypt)):
        p = sub.add_parser(name, help=f"{name.capitalize()} a file with a password")
        p.add_argument("password")
        p.add_argument("src")
        p.add_argument("dst")
        p.set_defaults(func=func)

    p = sub.add_parser("shred", help="Overwrite and delete files")
    p.add_argument("paths", nargs="+")
    p.add_argument("--force", action="store_true", help="Delete even if the overwrite fails")
    p.set_defaults(func=_cmd_shred)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging("homing", args.log_level)
    try:
        failures = args.func(args)
    except KeyboardInterrupt:
        print("\n  Interrupted.")
        return 130
    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())

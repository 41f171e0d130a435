from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from .client import Client
from .config import get_settings
from .errors import PhoneNumberParseError, SendblueError
from .phone import normalize
from .webhook import decode_webhook


def get_client() -> Client:
    return Client.from_settings(get_settings())


def _cmd_normalize(args: argparse.Namespace) -> int:
    region: str = args.region or get_settings().default_region
    print(normalize(args.number, region))
    return 0


def _cmd_send(args: argparse.Namespace) -> int:
    with get_client() as client:
        from_number = client.send_message(args.to, args.body)
    print(from_number)
    return 0


def _cmd_decode_webhook(args: argparse.Namespace) -> int:
    # stdin.buffer is left open for the interpreter to close
    stream = open(args.path, "rb") if args.path else open(sys.stdin.fileno(), "rb", closefd=False)
    message = decode_webhook(stream)
    print(message.model_dump_json())
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="sendblue", description="Sendblue messaging client")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p_norm = sub.add_parser("normalize", help="print a phone number in E.164 form")
    p_norm.add_argument("number", type=str)
    p_norm.add_argument("--region", type=str, default=None)
    p_norm.set_defaults(func=_cmd_normalize)

    p_send = sub.add_parser("send", help="send a message (credentials from SENDBLUE_* env vars)")
    p_send.add_argument("to", type=str)
    p_send.add_argument("body", type=str)
    p_send.set_defaults(func=_cmd_send)

    p_decode = sub.add_parser("decode-webhook", help="decode a webhook payload from FILE or stdin")
    p_decode.add_argument("path", type=Path, nargs="?", default=None)
    p_decode.set_defaults(func=_cmd_decode_webhook)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        return args.func(args)
    except PhoneNumberParseError as exc:
        print(f"error: {exc}: {exc.raw!r} (please check the phone number)", file=sys.stderr)
    except (SendblueError, RuntimeError, OSError) as exc:
        print(f"error: {exc}", file=sys.stderr)
    return 1


if __name__ == "__main__":
    sys.exit(main())

"""Operational CLI for NEO Watch.

Usage:
  neo-watch tick            # run one reconciliation tick against DATABASE_URL
  neo-watch score 3542519   # fetch an object from NeoWs and print its risk analysis
"""
import argparse
import asyncio
import json
import logging
import sys

from neo_watch.container import Container, init_container
from neo_watch.db.sessions import init_db
from neo_watch.errors import NeoWatchError
from neo_watch.providers import NeoObject
from neo_watch.risk import score


def print_json(data: object) -> None:
    print(json.dumps(data, indent=2, default=str))


async def cmd_tick(container: Container, _: argparse.Namespace) -> int:
    init_db(container.engine())
    summary = await container.scheduler().run_tick()
    if summary is None:
        print("A tick is already running", file=sys.stderr)
        return 1
    print_json(summary.model_dump(mode="json"))
    return 1 if summary.load_failed else 0


async def cmd_score(container: Container, args: argparse.Namespace) -> int:
    payload = await container.gateway().fetch_by_id(args.external_id)
    analysis = score(NeoObject.from_payload(payload))
    print_json({"id": payload.get("id"), "name": payload.get("name"), **analysis.model_dump(mode="json")})
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="neo-watch", description=__doc__.splitlines()[0])
    parser.add_argument("-v", "--verbose", action="store_true", help="Log at DEBUG level")
    sub = parser.add_subparsers(dest="command", required=True)

    tick = sub.add_parser("tick", help="Run one reconciliation tick now")
    tick.set_defaults(func=cmd_tick)

    score_cmd = sub.add_parser("score", help="Print the risk analysis of one object")
    score_cmd.add_argument("external_id", help="NeoWs object id")
    score_cmd.set_defaults(func=cmd_score)
    return parser


async def _run(args: argparse.Namespace) -> int:
    container = init_container()
    try:
        return await args.func(container, args)
    finally:
        await container.gateway().close()


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    try:
        return asyncio.run(_run(args))
    except NeoWatchError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())

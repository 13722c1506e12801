"""Simple entrypoint to fetch today's pick locally."""

import argparse
import asyncio
import json

from chronowear_app.app import ChronoWearApp


async def _run(args: argparse.Namespace) -> dict:
    app = ChronoWearApp()
    try:
        pick = await app.todays_pick(
            user_id=args.user_id,
            latitude=args.lat,
            longitude=args.lng,
            force_refresh=args.force,
        )
    finally:
        await app.shutdown()
    # Re-read so an image patched by the background task is included.
    return (app.pick_store.get(pick.user_id, pick.date) or pick).to_dict()


def main() -> None:
    parser = argparse.ArgumentParser(description="Print today's outfit pick as JSON.")
    parser.add_argument("user_id")
    parser.add_argument("--lat", type=float, default=None)
    parser.add_argument("--lng", type=float, default=None)
    parser.add_argument("--force", action="store_true", help="regenerate even if cached")
    args = parser.parse_args()
    print(json.dumps(asyncio.run(_run(args)), indent=2))


if __name__ == "__main__":
    main()

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from typing import Any

from bonosvip_gateway.config.settings import settings
from bonosvip_gateway.services.gateway import VoucherGateway


def _print_json(data: dict[str, Any]) -> None:
    print(json.dumps(data, ensure_ascii=False, indent=2))


async def _run(args: argparse.Namespace) -> bool:
    async with VoucherGateway.from_settings(settings) as gateway:
        if args.cmd == "health":
            health = gateway.health()
            _print_json(health.to_dict())
            return health.ready

        if args.cmd == "login":
            result = await gateway.login()
            _print_json(result.to_dict())
            return result.success

        if args.cmd == "validate":
            result = await gateway.validate(args.voucher_code)
            data = result.to_dict()
            if not args.show_raw and result.success:
                data["voucher"].pop("raw_response", None)
            _print_json(data)
            return result.success

    raise RuntimeError(f"Unknown command: {args.cmd}")


def main() -> None:
    """
    What it does:
    - Runs one gateway operation from the command line and prints its JSON result:
        1) validate: validate a voucher code (e.g. 1332-8584OGDTFXURK-1)
        2) login: force a fresh portal login (login mode) or re-read the cookies (cookies mode)
        3) health: report whether credentials are configured, without any network call

    Behavior:
    - Logging level comes from LOG_LEVEL.
    - Exits with status 1 when the operation did not succeed.
    """
    parser = argparse.ArgumentParser(prog="bonosvip-gateway")
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_validate = sub.add_parser("validate", help="Validate a voucher code against the portal.")
    p_validate.add_argument("voucher_code", type=str)
    p_validate.add_argument("--show-raw", action="store_true", help="Include the raw portal response.")

    sub.add_parser("login", help="Force a new portal session.")
    sub.add_parser("health", help="Show configuration readiness (no network).")

    args = parser.parse_args()

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if not asyncio.run(_run(args)):
        raise SystemExit(1)


if __name__ == "__main__":
    main()

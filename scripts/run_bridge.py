#!/usr/bin/env python3
"""Run the FordPass bridge in process.

Loads the platform configuration, restores cached accessories, signs in
to FordPass, registers the configured vehicles and keeps the session
refresh and status poll loops running until interrupted.

Configuration comes from ``--config`` (a JSON file holding either the
platform block itself or a host ``config.json`` whose ``platforms``
list contains a ``FordPass`` entry).  Without ``--config`` the
``FORDPASS_*`` environment variables are used.

Vehicles are published as a HomeKit bridge through HAP-python; pair it
with the setup code printed on first start (or ``--pincode``).
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import signal
import sys
from pathlib import Path
from typing import Any

# Allow running from repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pyfordpass._constants import HAP_PORT, PLATFORM_NAME  # noqa: E402
from pyfordpass.config import FordPassConfig  # noqa: E402
from pyfordpass.exceptions import FordPassConfigError  # noqa: E402
from pyfordpass.host.hap import HapHost  # noqa: E402
from pyfordpass.platform import FordPassPlatform  # noqa: E402

_LOG = logging.getLogger("pyfordpass.run_bridge")


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Expose FordPass vehicles as lock and remote-start accessories.")
    parser.add_argument("--config", type=Path, help="JSON platform config (default: FORDPASS_* environment)")
    parser.add_argument(
        "--cache",
        type=Path,
        default=Path.home() / ".pyfordpass" / "accessories.json",
        help="Accessory cache file (default: ~/.pyfordpass/accessories.json)",
    )
    parser.add_argument(
        "--hap-state",
        type=Path,
        default=Path.home() / ".pyfordpass" / "hap.state",
        help="HomeKit pairing state file (default: ~/.pyfordpass/hap.state)",
    )
    parser.add_argument("--port", type=int, default=HAP_PORT, help=f"HomeKit bridge port (default: {HAP_PORT})")
    parser.add_argument("--pincode", help="HomeKit setup code, e.g. 031-45-154 (default: generated)")
    parser.add_argument("--address", help="Address to advertise the bridge on (default: autodetect)")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser.parse_args()


def _load_platform_block(path: Path) -> dict[str, Any]:
    data = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(data, dict) and isinstance(data.get("platforms"), list):
        for block in data["platforms"]:
            if isinstance(block, dict) and block.get("platform") == PLATFORM_NAME:
                return block
        return {}
    if not isinstance(data, dict):
        raise FordPassConfigError(f"{path} does not contain a JSON object")
    return data


def _load_config(args: argparse.Namespace) -> dict[str, Any] | FordPassConfig | None:
    if args.config is not None:
        return _load_platform_block(args.config)
    try:
        return FordPassConfig.from_env()
    except FordPassConfigError as exc:
        _LOG.error("Environment configuration is incomplete: %s", exc)
        return None


async def _run(args: argparse.Namespace) -> int:
    config = _load_config(args)
    host = HapHost(args.cache, port=args.port, state_file=args.hap_state, pincode=args.pincode, address=args.address)
    platform = FordPassPlatform(config, host)
    if not platform.active:
        _LOG.error("No usable %s platform configuration; nothing to run", PLATFORM_NAME)
        return 2

    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for signum in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(signum, stop.set)

    await host.launch(platform)
    _LOG.info("Bridge running with %d vehicle(s); press Ctrl+C to stop", len(platform.registry))
    try:
        await stop.wait()
    finally:
        _LOG.info("Shutting down")
        await host.shutdown()
    return 0


def _main() -> int:
    args = _parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        return asyncio.run(_run(args))
    except (OSError, json.JSONDecodeError, FordPassConfigError) as exc:
        print(f"[bridge] Could not start: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(_main())

"""키오스크 디스플레이 CLI.

Run a display against a server::

    python -m app.kiosk --server http://localhost:8000 --screen lobby-1
"""

import argparse
import asyncio
import logging
from pathlib import Path
from typing import Any

import httpx
import qrcode

from app.kiosk.device_store import DeviceStore
from app.kiosk.display import KioskDisplay


def _render(token: dict[str, Any]) -> None:
    qr = qrcode.QRCode(border=2)
    qr.add_data(token["code"])
    qr.make(fit=True)
    qr.print_ascii(tty=False)
    print(f"{token.get('screen_name') or token.get('screen_id')}  kod: {token['code']}  son: {token['expires_at']}")


async def _read_code() -> str:
    return await asyncio.to_thread(input, "Erişim kodu: ")


async def _main(args: argparse.Namespace) -> None:
    store = DeviceStore(args.state)
    async with httpx.AsyncClient(base_url=args.server, timeout=10.0) as http:
        display = KioskDisplay(args.screen, store, http)
        await display.run(_read_code, on_token=_render)


def main() -> None:
    parser = argparse.ArgumentParser(prog="python -m app.kiosk", description="QR kiosk display")
    parser.add_argument("--server", required=True, help="API base URL, e.g. http://localhost:8000")
    parser.add_argument("--screen", required=True, help="Screen id to display")
    parser.add_argument("--state", default=str(Path.home() / ".personel-kiosk.json"), help="Device state file")
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args()

    logging.basicConfig(level=args.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    try:
        asyncio.run(_main(args))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()

"""Minimal demo browsing an inline catalog without touching the network."""

import asyncio
from pprint import pprint

from animescraper import AssetCache, CatalogClient, PaginationController, listing_url

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 8

PAGES = {
    listing_url("", 1): """
        <html><body>
          <div class="item"><img src="https://static.example/frieren.jpg">
            <a class="name" href="/watch/frieren.1">Frieren</a></div>
          <div class="item"><img src="https://static.example/mob.jpg">
            <a class="name" href="/watch/mob.2">Mob Psycho 100</a></div>
          <ul class="pagination"><li><a rel="last" href="/trending-anime/?page=2">»</a></li></ul>
        </body></html>
    """.encode("utf-8"),
    "https://static.example/frieren.jpg": PNG,
    "https://static.example/mob.jpg": PNG,
}


class InlineTransport:
    async def fetch(self, url: str) -> bytes:
        return PAGES[url]


async def main() -> None:
    transport = InlineTransport()
    controller = PaginationController(CatalogClient(transport), on_change=lambda snap: print("status:", snap.status.value))
    await controller.home()
    pprint([entry.to_dict() for entry in controller.entries])
    print(f"page {controller.state.current_page} of {controller.state.total_pages}")

    async with AssetCache(transport) as cache:
        requests = [cache.request(entry.poster_url) for entry in controller.entries]
        for entry in await asyncio.gather(*requests):
            print(entry.key, entry.state.value, len(entry.value or b""))


if __name__ == "__main__":
    asyncio.run(main())

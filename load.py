import random
import sys
from time import time

import anyio
from httpx import AsyncClient

# usage: python load.py <video id> [base url]
video_id = sys.argv[1]
base_url = sys.argv[2] if len(sys.argv) > 2 else "http://127.0.0.1:8000"

CHUNK = 1024 * 1024


async def play(client: AsyncClient, seeks: int) -> int:
    # a player: one full fetch, then a handful of seeks
    async with client.stream("GET", f"/v/{video_id}") as resp:
        resp.raise_for_status()
        total = int(resp.headers["Content-Length"])
        async for _ in resp.aiter_bytes():
            break
    served = 0
    for _ in range(seeks):
        start = random.randrange(total)
        resp = await client.get(f"/v/{video_id}", headers={"Range": f"bytes={start}-{start + CHUNK - 1}"})
        assert resp.status_code == 206, resp.status_code
        served += len(resp.content)
    return served


async def main() -> None:
    served: list[int] = []
    async with AsyncClient(base_url=base_url, timeout=30) as client:
        before = (await client.get("/api/health")).json()
        print(before)

        async def one() -> None:
            served.append(await play(client, seeks=8))

        start = time()
        async with anyio.create_task_group() as tg:
            for _ in range(64):
                tg.start_soon(one)
        end = time()
    print(f"Time: {end - start:.2f}")
    print(f"Plays: {len(served)}, ranged bytes: {sum(served)}")


anyio.run(main)

"""
Calls the server started from server.py.
To run: SIMPLYCALL_URL=http://localhost:8000/rpc python client.py
"""
import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent))

from simplycall import Client, HttpTransportConfig, RpcError
from simplycall.rpc import HttpSendTransport

from routes import files


async def main() -> None:
    config = HttpTransportConfig.from_env()
    transport = HttpSendTransport.from_config(config, headers={"x-user": "alice"})
    remote = Client(transport).on(files)

    print(await remote.put("hello.txt", b"hello world"))
    print(await remote.listing())
    print(await remote.get("hello.txt"))
    try:
        await remote.get(42)
    except RpcError as e:
        print("rejected:", e.payload)


if __name__ == "__main__":
    asyncio.run(main())

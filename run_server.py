#!/usr/bin/env python3
"""
Server startup script. Development runs a single reloading worker,
production runs several workers so one slow verification does not block
other requests.
"""

import uvicorn
import os


def main():
    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", 8000))
    workers = int(os.getenv("WORKERS", 4))
    development = os.getenv("DEVELOPMENT", "true").lower() == "true"

    print(f"🚀 Starting MorningProof API server...")
    print(f"   Host: {host}")
    print(f"   Port: {port}")
    print(f"   Workers: {1 if development else workers}")
    print(f"   Development mode: {development}")

    if development:
        # Hot reload requires a single worker
        uvicorn.run(
            "morningproof.main:app",
            host=host,
            port=port,
            reload=True,
            workers=1,
            limit_concurrency=100,
            timeout_keep_alive=5
        )
    else:
        uvicorn.run(
            "morningproof.main:app",
            host=host,
            port=port,
            workers=workers,
            reload=False,
            limit_concurrency=1000,
            timeout_keep_alive=30
        )


if __name__ == "__main__":
    main()

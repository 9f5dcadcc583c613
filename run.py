import os

import uvicorn

if __name__ == "__main__":
    port = int(os.environ.get("PORT", 8000))
    # Repository state (Supabase client, in-memory catalog) is per process;
    # scale with WEB_CONCURRENCY rather than threads.
    workers = int(os.environ.get("WEB_CONCURRENCY", 1))
    uvicorn.run(
        "drivematch.main:app",
        host="0.0.0.0",
        port=port,
        workers=workers,
    )

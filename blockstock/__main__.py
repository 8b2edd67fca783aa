import os

import uvicorn


def main() -> None:
    uvicorn.run(
        "blockstock.main:app",
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "5000")),
        reload=os.getenv("RELOAD", "").lower() in {"1", "true", "yes", "on"},
        log_config=None,
    )


if __name__ == "__main__":
    main()

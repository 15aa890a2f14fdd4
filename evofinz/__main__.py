"""Run the EvoFinz API with uvicorn (``python -m evofinz``)."""

import os


def main() -> None:
    import uvicorn

    uvicorn.run(
        "evofinz.main:app",
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8000")),
    )


if __name__ == "__main__":
    main()

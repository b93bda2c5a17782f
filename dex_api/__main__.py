# dex_api/__main__.py
import uvicorn

from dex_api.config import HOST, PORT


def main() -> None:
    uvicorn.run("dex_api.main:app", host=HOST, port=PORT)


if __name__ == "__main__":
    main()

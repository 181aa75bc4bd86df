"""
Run the API: python -m smeta (listens on PORT).
"""

import logging

import uvicorn

from .config import settings


def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    uvicorn.run("smeta.main:app", host="0.0.0.0", port=settings.PORT)


if __name__ == "__main__":
    main()

from loguru import logger

from treeshift.cli import app


def main() -> None:
    logger.debug("Starting treeshift CLI")
    app()


if __name__ == "__main__":
    main()

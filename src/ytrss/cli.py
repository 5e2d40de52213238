import argparse
import logging
import sys

import ytrss

from ytrss.config import load_settings
from ytrss.log import configure_logging
from ytrss.tui import YtrssApp
from ytrss.updater import check_and_update

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="ytrss")
    parser.add_argument("--debug", action="store_true")
    parser.add_argument("--version", action="store_true")
    args = parser.parse_args(argv)

    if args.version:
        print(f"ytrss {ytrss.__version__} ({ytrss.__file__})")
        return 0

    configure_logging(debug=args.debug)
    settings = load_settings()
    logger.info("Starting ytrss %s against %s", ytrss.__version__, settings.base_url)

    if settings.check_for_updates and check_and_update(ytrss.__version__):
        return 0

    app = YtrssApp(settings=settings)
    try:
        app.run()
    except Exception as exc:
        logger.exception("UI failed")
        print(f"Uh oh, there was an error: {exc}", file=sys.stderr)
        return 1
    return app.return_code or 0


def run() -> None:
    sys.exit(main())

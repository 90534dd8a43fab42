from .cli import EXIT_INTERRUPTED, main as cli_main
from ..utils.logging import get_logger

logger = get_logger(__name__)


def main(argv=None):
    try:
        return cli_main(argv)
    except KeyboardInterrupt:
        logger.info("Interrupted; facets finished so far are already saved.")
        return EXIT_INTERRUPTED


if __name__ == "__main__":
    raise SystemExit(main())

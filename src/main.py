import logging
import os
import sys

from models import LedgerError
from payments_engine import run

LOG_LEVEL_ENV = "TOY_LEDGER_LOG_LEVEL"

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    level_name = os.environ.get(LOG_LEVEL_ENV, "WARNING").upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )


def main(argv=None) -> int:
    configure_logging()
    args = sys.argv[1:] if argv is None else argv

    if len(args) != 1:
        print("Usage: toy-ledger <input.csv>", file=sys.stderr)
        return 1

    try:
        run(args[0], sys.stdout)
    except (LedgerError, OSError) as e:
        logger.error(f"Failed to process {args[0]}: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())

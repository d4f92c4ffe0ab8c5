import sys
import logging

from engine import PaymentsEngine
from errors import PaymentsError

logger = logging.getLogger(__name__)


def main() -> int:
    logging.basicConfig(
        level=logging.WARNING,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    if len(sys.argv) != 2:
        print("Usage: python main.py <input.csv>", file=sys.stderr)
        return 1

    filepath = sys.argv[1]
    engine = PaymentsEngine()
    try:
        engine.run(filepath, sys.stdout)
    except PaymentsError as e:
        logger.error(str(e))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())

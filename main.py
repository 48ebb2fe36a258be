import logging, sys

from app import QuizPlayer
from errors import ConfigurationError
from runtime_log import configure_logging
from sequence_verifier import verify_sequence
import config, web_remote

log = logging.getLogger("branchplay")


def main() -> int:
    configure_logging(config.LOG_LEVEL, config.LOG_FILE)
    try:
        if config.VERIFY_SEQUENCE_ON_START:
            verify_sequence(config.SEQUENCE_PATH)
        player = QuizPlayer()
        web_remote.start(player)
        player.run()
    except ConfigurationError as exc:
        log.error("%s: %s", exc.label(), exc.message)
        return exc.exit_code
    return 0


if __name__ == "__main__":
    sys.exit(main())

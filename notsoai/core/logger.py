import json
import logging

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s: %(message)s"

logger = logging.getLogger("notsoai")


def configure_logging(debug: bool = False) -> None:
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)

    logger.setLevel(logging.DEBUG if debug else logging.INFO)


def audit(action: str, **context) -> None:
    """
    Security-relevant events (denied access, logins).
    Never pass cookie values or secrets in here.
    """
    logger.info(
        "AUDIT %s | %s",
        action,
        json.dumps(context, default=str, sort_keys=True),
    )

import logging
import os


def configure_logging(level_name=None):
    level_name = (level_name or os.getenv("DEEPTALK_LOG_LEVEL", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("requests").setLevel(logging.WARNING)


def mask_token(token):
    if not token:
        return "None"
    token = str(token)
    return token[:8] + "..." if len(token) > 8 else "***"

import logging
import sys
from typing import Optional

from mintkit.config import settings
from mintkit.utils.logging_redaction import install_redaction_filter


def setup_logging(level: Optional[str] = None) -> None:
    """
    Configure SDK logging for scripts and bots.

    Applications embedding mintkit usually configure logging themselves;
    ``MintClient`` installs the redaction filter either way.
    """
    level = level or settings.LOG_LEVEL
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    install_redaction_filter()

    # web3/httpx are chatty at DEBUG
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("web3").setLevel(logging.WARNING)

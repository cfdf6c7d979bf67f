import logging
import os

from dotenv import load_dotenv

load_dotenv()

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
VIEWER_PAGE_TITLE = os.getenv("VIEWER_PAGE_TITLE", "🧾 Conferência Fiscal")


def configure_logging(level: str = LOG_LEVEL) -> None:
    """Configura o logging da aplicação. Nível desconhecido cai para INFO."""
    logging.basicConfig(level=getattr(logging, level, logging.INFO))

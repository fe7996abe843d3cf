import atexit
import logging

from dotenv import load_dotenv
from rich.logging import RichHandler

from .util import console_err

logger = logging.getLogger(__name__)


def init_env() -> None:
    # lets API keys live in a .env file in the working directory
    load_dotenv()


def init_logging(verbose: bool) -> None:
    handler = RichHandler(console=console_err)
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[handler],
        force=True,  # Override any previous logging configuration
    )

    # SDKs log every request at debug level
    logging.getLogger("anthropic").setLevel(logging.INFO)
    logging.getLogger("openai").setLevel(logging.INFO)
    logging.getLogger("google_genai").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    def cleanup_logging():
        logging.getLogger().removeHandler(handler)
        logging.shutdown()

    atexit.register(cleanup_logging)

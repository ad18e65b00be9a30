from .logger_config import EmojiFormatter, setup_logging

__all__ = ["EmojiFormatter", "setup_logging"]

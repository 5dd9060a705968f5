import logging
import os

SGR_CODES = {
    "RESET": 0,
    "BOLD": 1,
    "RED": 31,
    "GREEN": 32,
    "YELLOW": 33,
    "BLUE": 34,
    "MAGENTA": 35,
    "CYAN": 36,
}


def sgr(*names):
    return "\x1b[" + ";".join(str(SGR_CODES[n]) for n in names) + "m"


class ColorizingStreamHandler(logging.StreamHandler):
    """Stream handler which colours each line by level when writing to a terminal.

    Set COLORIZE_LOGS=always to colour output that isn't a TTY (e.g. under a
    process supervisor which passes colours through).
    """

    DEFAULT_COLORS = {
        "DEBUG": ["BLUE"],
        "WARNING": ["YELLOW"],
        "ERROR": ["RED"],
        "CRITICAL": ["RED", "BOLD"],
    }

    def __init__(self, stream=None, colors=None):
        super().__init__(stream)

        merged = dict(self.DEFAULT_COLORS)
        for level, names in (colors or {}).items():
            merged[level] = [names] if isinstance(names, str) else list(names)
        self.colors = {level: sgr(*names) for level, names in merged.items()}

        self.should_colorize = self.is_tty or os.getenv("COLORIZE_LOGS") == "always"

    @property
    def is_tty(self):
        isatty = getattr(self.stream, "isatty", None)
        return bool(isatty and isatty())

    def colorize(self, message, record):
        color = self.colors.get(record.levelname)
        if not color:
            return message
        return "\n".join(color + line + sgr("RESET") for line in message.splitlines())

    def format(self, record):
        message = super().format(record)
        if self.should_colorize:
            message = self.colorize(message, record)
        return message

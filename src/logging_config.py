import logging
import sys
from pathlib import Path
from typing import Optional

_NOISY_LOGGERS = ('watchdog', 'PIL')


def setup_logging(
    log_file: Optional[Path] = None,
    level: int = logging.INFO,
    fmt: str = '%(asctime)s %(levelname)s [%(name)s] %(message)s',
    datefmt: str = '%Y-%m-%d %H:%M:%S'
):
    """
    Configure root logger with a console handler (stdout) and optional file handler.
    Call this once at application startup; calling it again replaces the handlers
    it installed the first time.
    """
    root = logging.getLogger()
    root.setLevel(level)
    for handler in [h for h in root.handlers if getattr(h, '_seedshotter', False)]:
        root.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(fmt, datefmt=datefmt)

    # Console handler
    ch = logging.StreamHandler(sys.stdout)
    ch.setLevel(level)
    ch.setFormatter(formatter)
    ch._seedshotter = True
    root.addHandler(ch)

    # File handler
    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(log_file, encoding='utf-8')
        fh.setLevel(level)
        fh.setFormatter(formatter)
        fh._seedshotter = True
        root.addHandler(fh)

    # Notifier and image libraries log at WARNING and above.
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

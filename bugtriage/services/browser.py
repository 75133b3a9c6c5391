"""
Opens the generated report in the user's default browser.
"""
import os
import logging
import webbrowser
from pathlib import Path

logger = logging.getLogger(__name__)


def open_in_browser(path: str) -> bool:
    uri = Path(os.path.abspath(path)).as_uri()
    opened = webbrowser.open(uri)
    if not opened:
        print(f"Open {path} manually in your browser.")
        logger.warning("No browser available to open %s", uri)
    return opened

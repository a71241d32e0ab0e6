"""Browser session used by both pipeline passes."""

from .browser import BrowserSession, LAUNCH_ARGS

__all__ = ['BrowserSession', 'LAUNCH_ARGS']

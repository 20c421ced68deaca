"""
Logging Configuration + DebugLogger
====================================
Handler setup for the "instaauth" logger tree (instaauth.strategy,
instaauth.profile, instaauth.oauth2, instaauth.debug).

Everything written through these handlers passes TokenMaskingFormatter,
so access tokens that end up in URLs or curl error text are redacted
before reaching the console or the log file.

DebugLogger — structured, emoji-coded debug output for the OAuth
round trips (authorize, token exchange, profile fetch).
"""

import logging
import re
import sys
from logging.handlers import RotatingFileHandler
from typing import List, Optional


DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Debug format — compact, emoji-friendly
DEBUG_FORMAT = "%(asctime)s %(message)s"
DEBUG_DATE_FORMAT = "%H:%M:%S"

ROOT_LOGGER = "instaauth"

# access_token=..., client_secret=..., code=... in query strings / form dumps
_SECRET_PARAM_RE = re.compile(r"\b(access_token|refresh_token|client_secret|code)=([^&\s'\"]+)")
_BEARER_RE = re.compile(r"\b(Bearer)\s+([^\s'\"]+)", re.IGNORECASE)


def mask_token(value: str, show: int = 6) -> str:
    """Mask access tokens and secrets, showing only first N chars."""
    if not value:
        return "<empty>"
    if len(value) <= show:
        return "***"
    return value[:show] + "***"


def redact(text: str) -> str:
    """Mask every token-looking query param and Bearer credential in text."""
    text = _SECRET_PARAM_RE.sub(lambda m: f"{m.group(1)}={mask_token(m.group(2))}", text)
    return _BEARER_RE.sub(lambda m: f"{m.group(1)} {mask_token(m.group(2))}", text)


class TokenMaskingFormatter(logging.Formatter):
    """Formatter that redacts OAuth credentials from the final line."""

    def format(self, record: logging.LogRecord) -> str:
        return redact(super().format(record))


class LogConfig:
    """
    Attach handlers to the instaauth logger tree.

    Library modules only emit records; nothing is printed until the
    application (or DebugLogger(enabled=True)) calls configure().

    Usage:
        LogConfig.configure(level="INFO", filename="auth.log")
        LogConfig.configure_debug()
    """

    _handlers: List[logging.Handler] = []

    @classmethod
    def configure(
        cls,
        level: str = "INFO",
        filename: Optional[str] = None,
        console: bool = True,
        debug: bool = False,
        max_bytes: int = 5 * 1024 * 1024,
        backup_count: int = 2,
    ) -> logging.Logger:
        """
        Replace the handlers installed by a previous configure() call.

        Args:
            level: Level name for the "instaauth" logger
            filename: Rotating log file (None = no file)
            console: Write to stderr
            debug: Use the compact DebugLogger line format

        Returns:
            The "instaauth" logger
        """
        cls.reset()

        root = logging.getLogger(ROOT_LOGGER)
        root.setLevel(getattr(logging, level.upper(), logging.INFO))

        if debug:
            formatter = TokenMaskingFormatter(DEBUG_FORMAT, datefmt=DEBUG_DATE_FORMAT)
        else:
            formatter = TokenMaskingFormatter(DEFAULT_FORMAT, datefmt=DEFAULT_DATE_FORMAT)

        handlers: List[logging.Handler] = []
        if console:
            handlers.append(logging.StreamHandler(sys.stderr))
        if filename:
            handlers.append(RotatingFileHandler(
                filename, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8",
            ))

        for handler in handlers:
            handler.setFormatter(formatter)
            root.addHandler(handler)
        cls._handlers = handlers

        # Records already handled here must not reach the host's root logger twice
        root.propagate = not handlers
        return root

    @classmethod
    def configure_debug(cls, filename: Optional[str] = None) -> logging.Logger:
        """DEBUG level, compact format, console plus optional file."""
        return cls.configure(level="DEBUG", filename=filename, console=True, debug=True)

    @classmethod
    def reset(cls) -> None:
        """Remove (and close) handlers added by configure()."""
        root = logging.getLogger(ROOT_LOGGER)
        for handler in cls._handlers:
            root.removeHandler(handler)
            handler.close()
        cls._handlers = []
        root.propagate = True

    @classmethod
    def is_configured(cls) -> bool:
        return bool(cls._handlers)


class DebugLogger:
    """
    Structured debug logger for OAuth HTTP traffic.

    Categories:
        🔵 REQUEST   — outgoing HTTP request (token masked)
        🟢 RESPONSE  — response status, timing and size
        🔴 ERROR     — error details

    Usage:
        dbg = DebugLogger(enabled=True)
        dbg.request("GET", "https://graph.instagram.com/me", token="IGQV...")
        dbg.response(200, elapsed_ms=245, size_bytes=120)
    """

    def __init__(self, enabled: bool = False, log_file: Optional[str] = None):
        self.enabled = enabled
        self._logger = logging.getLogger("instaauth.debug")
        if enabled:
            LogConfig.configure_debug(filename=log_file)

    @staticmethod
    def _format_size(size_bytes: int) -> str:
        if size_bytes < 1024:
            return f"{size_bytes}B"
        return f"{size_bytes / 1024:.1f}KB"

    def request(self, method: str, url: str, token: str = "", has_data: bool = False) -> None:
        """Log outgoing HTTP request."""
        if not self.enabled:
            return

        parts = [f"🔵 REQUEST {method} {url}"]
        if token:
            parts.append(f"token={mask_token(token)}")
        if has_data:
            parts.append("body=FORM_DATA")

        self._logger.debug(" | ".join(parts))

    def response(self, status_code: int, elapsed_ms: float, size_bytes: int = 0, url: str = "") -> None:
        """Log HTTP response."""
        if not self.enabled:
            return

        status_emoji = "🟢" if 200 <= status_code < 300 else "🟡"
        parts = [f"{status_emoji} RESPONSE {status_code}"]
        if url:
            parts.append(url)
        parts.append(f"{elapsed_ms:.0f}ms")
        if size_bytes:
            parts.append(self._format_size(size_bytes))

        self._logger.debug(" | ".join(parts))

    def error(
        self,
        error_type: str,
        status_code: int = 0,
        endpoint: str = "",
        message: str = "",
        response_preview: str = "",
    ) -> None:
        """Log error with diagnostics."""
        if not self.enabled:
            return

        parts = [f"🔴 ERROR {error_type}"]
        if status_code:
            parts.append(f"HTTP {status_code}")
        if endpoint:
            parts.append(endpoint)
        if message:
            parts.append(f"msg={message[:120]}")
        if response_preview:
            parts.append(f"body={response_preview[:200]}")

        self._logger.debug(" | ".join(parts))


# ─── Global debug logger singleton ────────────────────────────
_debug_logger: Optional[DebugLogger] = None


def get_debug_logger() -> DebugLogger:
    """Get the global DebugLogger instance."""
    global _debug_logger
    if _debug_logger is None:
        _debug_logger = DebugLogger(enabled=False)
    return _debug_logger


def set_debug_logger(logger: DebugLogger) -> None:
    """Set the global DebugLogger instance."""
    global _debug_logger
    _debug_logger = logger

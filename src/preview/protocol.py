"""Terminal graphics capability detection."""

from __future__ import annotations

import logging
import os
import shutil
from collections.abc import Callable, Mapping

from shared.constants import (
    ENV_KITTY_WINDOW_ID,
    ENV_TERM,
    GENERAL_HELPER,
    NATIVE_TERM_SIGNATURE,
    SIXEL_HELPER,
    Protocol,
)

logger = logging.getLogger(__name__)


class ProtocolDetector:
    """
    Picks the best available rendering tier, first match wins.

    Environment and executable lookup are injected so callers can pin the
    result in tests.
    """

    def __init__(
        self,
        environ: Mapping[str, str] | None = None,
        which: Callable[[str], str | None] = shutil.which,
    ) -> None:
        self._environ = environ if environ is not None else os.environ
        self._which = which

    def is_native_terminal(self) -> bool:
        term = self._environ.get(ENV_TERM, '')
        window_id = self._environ.get(ENV_KITTY_WINDOW_ID, '')
        return NATIVE_TERM_SIGNATURE in term or bool(window_id)

    def has_helper(self, name: str) -> bool:
        return self._which(name) is not None

    def detect(self) -> Protocol:
        if self.is_native_terminal():
            protocol = Protocol.NATIVE
        elif self.has_helper(SIXEL_HELPER):
            protocol = Protocol.SIXEL_HELPER
        elif self.has_helper(GENERAL_HELPER):
            protocol = Protocol.GENERAL_HELPER
        else:
            protocol = Protocol.ASCII
        logger.info('Detected terminal image protocol: %s', protocol.value)
        return protocol


class FixedProtocol:
    """Detector stand-in that always reports the same tier."""

    def __init__(self, protocol: Protocol) -> None:
        self.protocol = protocol

    def detect(self) -> Protocol:
        return self.protocol


def detect_image_protocol() -> Protocol:
    return ProtocolDetector().detect()

"""Interactive terminal map preview.

This package provides:
- Viewport / StyleSelection: pan and zoom state with world-edge clamping
- ProtocolDetector: terminal graphics capability detection
- ImageRenderer: helper-based rendering with ASCII fallback
- MapPreviewController: mailbox dispatcher tying it all together
"""

from preview.controller import MapPreviewController, PreviewView
from preview.protocol import FixedProtocol, ProtocolDetector, detect_image_protocol
from preview.renderer import ImageRenderer, RenderError, render_ascii
from preview.viewport import StyleSelection, Viewport, bbox_for

__all__ = [
    'FixedProtocol',
    'ImageRenderer',
    'MapPreviewController',
    'PreviewView',
    'ProtocolDetector',
    'RenderError',
    'StyleSelection',
    'Viewport',
    'bbox_for',
    'detect_image_protocol',
    'render_ascii',
]

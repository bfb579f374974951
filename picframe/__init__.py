"""Picture-frame toolkit: BMP/JPEG decoding, scaling, drawing, touch pages and a UDP debug client."""

__version__ = "0.1.0"
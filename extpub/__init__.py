"""Publishing policy for multi-project builds targeting a Sonatype-like host."""

__version__ = "0.1.0"

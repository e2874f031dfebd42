"""Marketing site backend: contact / demo request form handling."""

__version__ = "1.0.0"

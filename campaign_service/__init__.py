"""Campaign targeting service: rule-based customer audiences for marketing campaigns."""

__version__ = "0.1.0"

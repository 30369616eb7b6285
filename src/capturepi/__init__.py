"""capturepi: record sensor captures on a field device and persist them.

Subpackages:
- :mod:`capturepi.core` - captures, signals, and the session controller
- :mod:`capturepi.store` - key-value capture persistence
- :mod:`capturepi.hardware` - platform capabilities and board registry
- :mod:`capturepi.config` - YAML configuration
"""

__version__ = "0.1.0"

"""Version information for the YOP Python SDK"""

__version__ = "0.1.0"

SDK_LANG = "python"
SDK_VERSION = f"yop-python-sdk/{__version__}"

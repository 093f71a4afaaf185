version = "0.6.0"
__version__ = version

"""axegrid — axe-core accessibility runs against local browsers or a remote grid."""

__version__ = "0.3.0"

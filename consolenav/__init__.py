"""consolenav - Navigation configuration manager for the operator console."""

__version__ = "0.1.0"

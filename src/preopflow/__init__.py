"""
PreopFlow: pre-operative circuit flow coordinator

Registers patients, seeds their required circuit steps and calls them
station by station until every step is completed.
"""

__version__ = "0.1.0"
__author__ = "PreopFlow Team"
__description__ = "Pre-operative circuit flow coordinator"

"""
Parser utilities for extracting structured data from host documents.
"""

from .bmc_address_parser import BMCAddressParser

__all__ = ['BMCAddressParser']

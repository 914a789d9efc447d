"""
DDNS Relay - A dynamic DNS update endpoint for CloudFlare.

This package receives DynDNS-style update requests carrying CloudFlare
credentials and reconciles existing A/AAAA records with the requested address.
"""

__version__ = "0.1.0"
__author__ = "DDNS Relay Contributors"

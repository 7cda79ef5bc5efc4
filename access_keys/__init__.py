"""
Access keys module - key issuing, validation and administration.

This module handles:
- KeyRecord entity and the key lifecycle state machine
- The KeyStore port and its JSON document implementation
- Consuming validation and non-consuming status checks
- Administrative commands (create, revoke, reactivate, delete, sweeps)
"""

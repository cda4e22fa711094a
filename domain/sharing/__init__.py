"""Sharing Bounded Context.

Responsible for shareable links:
- Value Objects: SharePayload
- Ports: ShareLocation
- Services: share token codec, share URL parameter handling
"""

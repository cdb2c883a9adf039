"""Backend for the therapy equipment rental marketplace.

Chat, proximity search, vendor listings and reviews over MongoDB,
with Socket.IO push for live conversation updates.
"""

__version__ = '1.0.0'

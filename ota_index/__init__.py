"""
Zigbee OTA index merger.

Combines server-configured and user-stored firmware index sources into a
single deduplicated `index.json`.
"""

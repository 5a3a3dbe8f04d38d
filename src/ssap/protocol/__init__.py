"""
The SSAP line protocol: framing of the incoming byte stream, the handoff of complete lines to
their consumer, message encoding and the background loops that drive the link.
"""
